from datetime import date, timedelta

import pytest

from gestao_juridica.models import db, Feriado
from gestao_juridica.services import agenda_service, prazo_service
from gestao_juridica.services.prazo_service import calcular_data_limite, criticidade


# 2024-05-03 é uma sexta-feira
INTIMACAO = date(2024, 5, 3)


def test_dias_uteis_ignoram_fim_de_semana():
    resultado = calcular_data_limite(INTIMACAO, 5)
    assert resultado['data_limite'] == date(2024, 5, 10)
    assert resultado['dias_fins_semana'] == 2
    assert resultado['linha_tempo'][0]['data'] == '2024-05-04'
    assert resultado['linha_tempo'][0]['contado'] is False
    assert resultado['linha_tempo'][-1]['numero'] == 5


def test_feriado_nao_conta():
    resultado = calcular_data_limite(INTIMACAO, 5, feriados={date(2024, 5, 8)})
    assert resultado['data_limite'] == date(2024, 5, 13)
    assert resultado['dias_feriados'] == 1


def test_dias_corridos_prorrogam_termo_final():
    resultado = calcular_data_limite(INTIMACAO, 8, dias_uteis=False)
    # 8º dia cai no sábado 11/05
    assert resultado['data_limite'] == date(2024, 5, 13)
    assert resultado['dias_corridos'] == 10


def test_quantidade_invalida():
    with pytest.raises(ValueError):
        calcular_data_limite(INTIMACAO, 0)
    with pytest.raises(ValueError):
        calcular_data_limite(None, 5)


def test_criticidade():
    hoje = date(2024, 5, 10)
    assert criticidade(date(2024, 5, 9), hoje) == 'vencido'
    assert criticidade(date(2024, 5, 10), hoje) == 'hoje'
    assert criticidade(date(2024, 5, 12), hoje) == 'critico'
    assert criticidade(date(2024, 5, 15), hoje) == 'urgente'
    assert criticidade(date(2024, 5, 20), hoje) == 'atencao'
    assert criticidade('2024-05-21', hoje) == 'normal'


def test_calcular_prazo_usa_feriados_cadastrados(app):
    db.session.add(Feriado(data=date(2024, 5, 8), descricao='Feriado local', abrangencia='estadual', uf='SP'))
    db.session.commit()

    assert prazo_service.calcular_prazo(INTIMACAO, 5)['data_limite'] == date(2024, 5, 10)
    assert prazo_service.calcular_prazo(INTIMACAO, 5, uf='sp')['data_limite'] == date(2024, 5, 13)


def test_feriados(app):
    feriado = prazo_service.criar_feriado({'data': '2024-11-20', 'descricao': 'Consciência Negra'})
    db.session.commit()
    assert feriado.uf is None

    with pytest.raises(ValueError):
        prazo_service.criar_feriado({'data': '2024-11-20', 'descricao': 'Duplicado'})
    with pytest.raises(ValueError):
        prazo_service.criar_feriado({'data': '2024-07-09', 'descricao': 'Revolução', 'abrangencia': 'estadual'})

    assert [f.descricao for f in prazo_service.listar_feriados(2024)] == ['Consciência Negra']


def test_feriados_nacionais_incluem_os_moveis():
    # Páscoa de 2024: 31 de março
    feriados = dict(prazo_service.feriados_nacionais(2024))
    assert feriados[date(2024, 2, 12)] == 'Carnaval'
    assert feriados[date(2024, 2, 13)] == 'Carnaval'
    assert feriados[date(2024, 3, 29)] == 'Sexta-feira Santa'
    assert feriados[date(2024, 5, 30)] == 'Corpus Christi'
    assert feriados[date(2024, 12, 25)] == 'Natal'
    assert len(feriados) == 13


def test_prazo_pula_sexta_feira_santa(app):
    assert prazo_service.cadastrar_feriados_nacionais(2024) == 13
    db.session.commit()
    assert prazo_service.cadastrar_feriados_nacionais(2024) == 0

    # intimação na quarta-feira santa: quinta conta, sexta não
    resultado = prazo_service.calcular_prazo('2024-03-27', 2)
    assert resultado['data_limite'] == date(2024, 4, 1)
    assert resultado['dias_feriados'] == 1


def test_listar_prazos_por_criticidade(app, processo):
    hoje = date.today()
    agenda_service.criar_tarefa({'titulo': 'Recurso', 'processo_id': processo.id,
                                 'data_inicio': hoje.isoformat(),
                                 'prazo_data_limite': (hoje + timedelta(days=1)).isoformat()})
    agenda_service.criar_tarefa({'titulo': 'Manifestação', 'data_inicio': hoje.isoformat(),
                                 'prazo_data_limite': (hoje + timedelta(days=30)).isoformat()})
    db.session.commit()

    prazos = prazo_service.listar_prazos(hoje)
    assert [p['titulo'] for p in prazos] == ['Recurso', 'Manifestação']
    assert prazos[0]['dias_restantes'] == 1

    criticos = prazo_service.listar_prazos(hoje, nivel='critico')
    assert [p['titulo'] for p in criticos] == ['Recurso']

    with pytest.raises(ValueError):
        prazo_service.listar_prazos(hoje, nivel='gravissimo')


def test_marcar_prazo_cumprido(app):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Juntada', 'prazo_data_limite': '2024-05-10'})
    db.session.commit()

    prazo_service.marcar_prazo_cumprido(tarefa.id)
    db.session.commit()

    assert tarefa.prazo_cumprido is True
    assert tarefa.status == 'concluida'
    assert prazo_service.listar_prazos(date(2024, 5, 1)) == []
