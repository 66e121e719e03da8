from datetime import date
from types import SimpleNamespace

import pytest

from gestao_juridica.models import db, Tarefa, Evento
from gestao_juridica.services import agenda_service, recorrencia_service
from gestao_juridica.services.recorrencia_service import ULTIMO_DIA, calcular_datas, resumo


def regra(**campos):
    base = dict(regra_frequencia='diaria', regra_intervalo=1, regra_dias_semana=[], regra_dia_mes=None,
                regra_mes=None, regra_hora=None, regra_apenas_uteis=False, data_inicio=date(2024, 5, 1),
                data_fim=None, max_ocorrencias=None)
    base.update(campos)
    return SimpleNamespace(**base)


# ============================================================================
# CÁLCULO DE DATAS
# ============================================================================

def test_diaria_apenas_dias_uteis():
    r = regra(regra_apenas_uteis=True, data_inicio=date(2024, 5, 3))
    assert calcular_datas(r, date(2024, 5, 3), date(2024, 5, 8)) == [
        date(2024, 5, 3), date(2024, 5, 6), date(2024, 5, 7), date(2024, 5, 8)]


def test_semanal_em_dias_escolhidos():
    # 1 = segunda, 3 = quarta; 01/05/2024 é quarta
    r = regra(regra_frequencia='semanal', regra_dias_semana=[1, 3])
    assert calcular_datas(r, date(2024, 5, 1), date(2024, 5, 15)) == [
        date(2024, 5, 1), date(2024, 5, 6), date(2024, 5, 8), date(2024, 5, 13), date(2024, 5, 15)]


def test_semanal_a_cada_duas_semanas():
    r = regra(regra_frequencia='semanal', regra_intervalo=2, regra_dias_semana=[1], data_inicio=date(2024, 5, 6))
    assert calcular_datas(r, date(2024, 5, 1), date(2024, 6, 5)) == [
        date(2024, 5, 6), date(2024, 5, 20), date(2024, 6, 3)]


def test_mensal_dia_31_em_meses_curtos():
    r = regra(regra_frequencia='mensal', regra_dia_mes=31, data_inicio=date(2024, 1, 31))
    assert calcular_datas(r, date(2024, 1, 1), date(2024, 4, 30)) == [
        date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]


def test_mensal_ultimo_dia():
    r = regra(regra_frequencia='mensal', regra_dia_mes=ULTIMO_DIA, data_inicio=date(2024, 2, 10))
    assert calcular_datas(r, date(2024, 2, 1), date(2024, 3, 31)) == [date(2024, 2, 29), date(2024, 3, 31)]


def test_anual_29_de_fevereiro():
    r = regra(regra_frequencia='anual', regra_mes=2, regra_dia_mes=29, data_inicio=date(2024, 1, 1))
    assert calcular_datas(r, date(2024, 1, 1), date(2025, 12, 31)) == [date(2024, 2, 29), date(2025, 2, 28)]


def test_limites_da_serie():
    # max_ocorrencias conta desde a primeira data da série
    r = regra(max_ocorrencias=3)
    assert calcular_datas(r, date(2024, 5, 2), date(2024, 5, 10)) == [date(2024, 5, 2), date(2024, 5, 3)]

    r = regra(data_fim=date(2024, 5, 3))
    assert calcular_datas(r, date(2024, 5, 1), date(2024, 5, 10)) == [
        date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]

    assert calcular_datas(regra(), date(2024, 5, 10), date(2024, 5, 1)) == []


def test_resumo_legivel():
    assert resumo(regra(regra_apenas_uteis=True)) == 'Todo dia útil'
    assert resumo(regra(regra_frequencia='semanal', regra_dias_semana=[1, 3], regra_hora='09:00')) == \
        'Toda semana: Segunda, Quarta às 09:00'
    assert resumo(regra(regra_frequencia='mensal', regra_dia_mes=ULTIMO_DIA, max_ocorrencias=12)) == \
        'Todo mês, último dia (12x)'
    assert resumo(regra(regra_frequencia='anual', regra_mes=2, regra_dia_mes=10, data_fim=date(2030, 1, 1))) == \
        'Todo ano, 10 de Fevereiro até 01/01/2030'


# ============================================================================
# REGRAS, MATERIALIZAÇÃO E EXCLUSÕES
# ============================================================================

def _criar_diaria(**extra):
    dados = {'template_nome': 'Conferir publicações', 'entidade_tipo': 'tarefa',
             'regra_frequencia': 'diaria', 'data_inicio': '2024-05-01',
             'template_dados': {'prioridade': 'alta'}}
    dados.update(extra)
    r = recorrencia_service.criar_recorrencia(dados)
    db.session.commit()
    return r


def test_validacao_da_regra(app, processo):
    with pytest.raises(ValueError):
        _criar_diaria(regra_frequencia='horaria')
    with pytest.raises(ValueError):
        _criar_diaria(regra_dias_semana=[7])
    with pytest.raises(ValueError):
        _criar_diaria(data_fim='2024-04-01')
    with pytest.raises(ValueError):
        _criar_diaria(entidade_tipo='audiencia', template_dados={'processo_id': processo.id})

    r = _criar_diaria()
    assert r.proxima_execucao == date(2024, 5, 1)


def test_processar_janela_e_idempotente(app):
    r = _criar_diaria()

    resultado = recorrencia_service.processar_janela(date(2024, 5, 1), janela_dias=6)
    assert resultado['success'] is True
    assert resultado['ocorrencias_criadas'] == 7

    tarefas = Tarefa.query.filter_by(recorrencia_id=r.id).order_by(Tarefa.data_inicio).all()
    assert tarefas[0].recorrencia_data == date(2024, 5, 1)
    assert tarefas[-1].data_inicio == date(2024, 5, 7)
    assert all(t.prioridade == 'alta' for t in tarefas)

    assert recorrencia_service.processar_janela(date(2024, 5, 1), janela_dias=6)['ocorrencias_criadas'] == 0
    assert r.total_criados == 7
    assert r.proxima_execucao == date(2024, 5, 8)


def test_agenda_combina_reais_e_virtuais(app):
    r = _criar_diaria()
    recorrencia_service.processar_janela(date(2024, 5, 1), janela_dias=6)

    itens = agenda_service.listar_itens('2024-05-01', '2024-05-10')
    reais = [i for i in itens if not i['is_virtual']]
    virtuais = [i for i in itens if i['is_virtual']]
    assert len(reais) == 7
    assert [i['id'] for i in virtuais] == [f'virtual:{r.id}:2024-05-08', f'virtual:{r.id}:2024-05-09',
                                           f'virtual:{r.id}:2024-05-10']

    assert len(agenda_service.listar_itens('2024-05-01', '2024-05-10', incluir_virtuais=False)) == 7


def test_excluir_esta_ocorrencia(app):
    r = _criar_diaria()
    recorrencia_service.processar_janela(date(2024, 5, 1), janela_dias=6)

    resultado = recorrencia_service.excluir_ocorrencia(r.id, '2024-05-03', 'esta')
    db.session.commit()
    assert resultado['ocorrencias_removidas'] == 1

    assert recorrencia_service.processar_janela(date(2024, 5, 1), janela_dias=6)['ocorrencias_criadas'] == 0
    datas = [i['data_inicio'][:10] for i in agenda_service.listar_itens('2024-05-01', '2024-05-05')]
    assert '2024-05-03' not in datas

    with pytest.raises(ValueError):
        recorrencia_service.materializar(r, date(2024, 5, 3))


def test_excluir_todas_a_partir_de_hoje(app):
    r = _criar_diaria()
    recorrencia_service.processar_janela(date(2024, 5, 1), janela_dias=6)
    agenda_service.concluir_tarefa(Tarefa.query.filter_by(recorrencia_data=date(2024, 5, 6)).first().id)
    db.session.commit()

    resultado = recorrencia_service.excluir_ocorrencia(r.id, None, 'todas', hoje=date(2024, 5, 5))
    db.session.commit()

    # 05/05 e 07/05 removidas; 06/05 já estava concluída
    assert resultado['ocorrencias_removidas'] == 2
    assert r.ativo is False
    assert Tarefa.query.filter_by(recorrencia_id=r.id).count() == 5


def test_materializar_ocorrencia_virtual(app):
    r = recorrencia_service.criar_recorrencia({
        'template_nome': 'Reunião de equipe', 'entidade_tipo': 'evento', 'regra_frequencia': 'semanal',
        'regra_dias_semana': [1], 'regra_hora': '09:30', 'data_inicio': '2024-05-06',
        'template_dados': {'duracao_minutos': 45, 'local': 'Sala 2'}
    })
    db.session.commit()

    evento = recorrencia_service.materializar_virtual(f'virtual:{r.id}:2024-05-13')
    db.session.commit()
    assert isinstance(evento, Evento)
    assert evento.data_inicio.isoformat() == '2024-05-13T09:30:00'
    assert evento.data_fim.isoformat() == '2024-05-13T10:15:00'
    assert evento.local == 'Sala 2'

    assert recorrencia_service.materializar_virtual(f'virtual:{r.id}:2024-05-13').id == evento.id

    with pytest.raises(ValueError):
        recorrencia_service.materializar_virtual(f'virtual:{r.id}:2024-05-14')
    with pytest.raises(ValueError):
        recorrencia_service.parse_id_virtual('tarefa:1')
