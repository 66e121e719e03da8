from datetime import date

import pytest

from gestao_juridica.errors import ConfirmacaoNecessaria
from gestao_juridica.models import db, Evento
from gestao_juridica.services import agenda_service, recorrencia_service

HOJE = date(2024, 5, 10)


def item(tipo, titulo, **campos):
    base = {'tipo_entidade': tipo, 'titulo': titulo, 'status': 'pendente', 'prioridade': None,
            'horario_planejado_dia': None, 'prazo_data_limite': None, 'prazo_cumprido': False,
            'data_inicio': '2024-05-10T00:00:00'}
    base.update(campos)
    return base


def test_ordenacao_dos_itens_do_dia():
    itens = [
        item('evento', 'Reunião', data_inicio='2024-05-10T09:00:00'),
        item('tarefa', 'Baixa', prioridade='baixa'),
        item('audiencia', 'Audiência', data_inicio='2024-05-10T14:00:00'),
        item('tarefa', 'Alta 10h', prioridade='alta', horario_planejado_dia='10:00',
             data_inicio='2024-05-10T10:00:00'),
        item('tarefa', 'Alta sem horário', prioridade='alta'),
        item('tarefa', 'Prazo vence hoje', prioridade='baixa', prazo_data_limite='2024-05-10'),
        item('tarefa', 'Prazo vencido', prioridade='media', prazo_data_limite='2024-05-08'),
        item('tarefa', 'Prazo cumprido', prioridade='media', prazo_data_limite='2024-05-08', prazo_cumprido=True),
    ]

    ordem = [i['titulo'] for i in agenda_service.ordenar_itens_do_dia(itens, HOJE)]
    assert ordem == ['Prazo vencido', 'Prazo cumprido', 'Prazo vence hoje', 'Audiência', 'Alta sem horário',
                     'Alta 10h', 'Baixa', 'Reunião']


def test_horario_planejado_so_desempata_entre_tarefas_com_horario():
    itens = [
        item('tarefa', '14h', prioridade='alta', horario_planejado_dia='14:00', data_inicio='2024-05-10T14:00:00'),
        item('tarefa', 'Com horário', prioridade='alta', horario_planejado_dia='10:00',
             data_inicio='2024-05-10T10:00:00'),
        item('tarefa', 'Sem horário', prioridade='alta'),
    ]

    ordem = [i['titulo'] for i in agenda_service.ordenar_itens_do_dia(itens, HOJE)]
    assert ordem == ['Sem horário', 'Com horário', '14h']


def test_prazo_vencido_de_tarefa_concluida_continua_urgente():
    itens = [
        item('tarefa', 'Normal', prioridade='alta'),
        item('tarefa', 'Concluída com prazo vencido', prioridade='baixa', status='concluida',
             prazo_data_limite='2024-05-01', prazo_cumprido=True),
    ]

    ordem = [i['titulo'] for i in agenda_service.ordenar_itens_do_dia(itens, HOJE)]
    assert ordem == ['Concluída com prazo vencido', 'Normal']


def test_agrupar_por_dia():
    itens = [item('tarefa', 'B', data_inicio='2024-05-11T00:00:00'), item('tarefa', 'A')]
    assert [d['data'] for d in agenda_service.agrupar_por_dia(itens, HOJE)] == ['2024-05-10', '2024-05-11']
    assert [d['data'] for d in agenda_service.agrupar_por_dia(itens, HOJE, passado=True)] == \
        ['2024-05-11', '2024-05-10']


# ============================================================================
# TAREFAS
# ============================================================================

def test_tarefa_calcula_prazo_fatal_da_intimacao(app):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Contestação', 'tipo': 'prazo_processual',
                                          'prazo_data_intimacao': '2024-05-03', 'prazo_quantidade_dias': 5,
                                          'checklist': ['Minuta', 'Revisão']})
    db.session.commit()

    assert tarefa.prazo_data_limite == date(2024, 5, 10)
    assert tarefa.data_inicio == date(2024, 5, 10)
    assert [c.item for c in tarefa.checklist] == ['Minuta', 'Revisão']

    with pytest.raises(ValueError):
        agenda_service.criar_tarefa({'titulo': 'Tarde demais', 'data_inicio': '2024-05-11',
                                     'prazo_data_limite': '2024-05-10'})


def test_checklist(app):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Petição', 'data_inicio': '2024-05-06', 'checklist': ['Minuta']})
    novo = agenda_service.adicionar_item_checklist(tarefa.id, 'Protocolo')
    db.session.commit()
    assert novo.ordem == 1

    agenda_service.alternar_item_checklist(tarefa.id, novo.id)
    db.session.commit()
    assert novo.concluido is True
    assert novo.concluido_em is not None


def test_alterar_prazo_fatal_exige_confirmacao(app):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Recurso', 'data_inicio': '2024-05-06',
                                          'prazo_data_limite': '2024-05-10'})
    db.session.commit()

    with pytest.raises(ConfirmacaoNecessaria) as erro:
        agenda_service.atualizar_tarefa(tarefa.id, {'prazo_data_limite': '2024-05-20'})
    assert erro.value.detalhes['novo_prazo_fatal'] == '2024-05-20'

    agenda_service.atualizar_tarefa(tarefa.id, {'prazo_data_limite': '2024-05-20', 'confirmar_prazo': True})
    db.session.commit()
    assert tarefa.prazo_data_limite == date(2024, 5, 20)

    with pytest.raises(ValueError):
        agenda_service.alterar_prazo_fatal(tarefa.id, '2024-05-01', confirmar=True)


# ============================================================================
# MOVER ITENS
# ============================================================================

def test_mover_tarefa_alem_do_prazo(app):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Recurso', 'data_inicio': '2024-05-06',
                                          'prazo_data_limite': '2024-05-10'})
    db.session.commit()

    agenda_service.mover_item(f'tarefa:{tarefa.id}', '2024-05-09')
    db.session.commit()
    assert tarefa.data_inicio == date(2024, 5, 9)

    with pytest.raises(ConfirmacaoNecessaria) as erro:
        agenda_service.mover_item(f'tarefa:{tarefa.id}', '2024-05-12')
    detalhes = erro.value.detalhes
    assert detalhes['distancia_original_dias'] == 1
    assert detalhes['novo_prazo_fatal_sugerido'] == '2024-05-13'

    with pytest.raises(ValueError):
        agenda_service.mover_item(f'tarefa:{tarefa.id}', '2024-05-12', novo_prazo_fatal='2024-05-11')

    agenda_service.mover_item(f'tarefa:{tarefa.id}', '2024-05-12', novo_horario='08:30',
                              novo_prazo_fatal='2024-05-13')
    db.session.commit()
    assert tarefa.data_inicio == date(2024, 5, 12)
    assert tarefa.prazo_data_limite == date(2024, 5, 13)
    assert tarefa.horario_planejado_dia == '08:30'


def test_mover_evento_mantem_horario_e_duracao(app):
    evento = agenda_service.criar_evento({'titulo': 'Reunião com cliente', 'data_inicio': '2024-05-06T09:00',
                                          'data_fim': '2024-05-06T10:30'})
    db.session.commit()

    agenda_service.mover_item(f'evento:{evento.id}', '2024-05-08')
    db.session.commit()
    assert evento.data_inicio.isoformat() == '2024-05-08T09:00:00'
    assert evento.data_fim.isoformat() == '2024-05-08T10:30:00'

    agenda_service.mover_item(f'evento:{evento.id}', '2024-05-09', novo_horario='14:00')
    db.session.commit()
    assert evento.data_fim.isoformat() == '2024-05-09T15:30:00'


def test_itens_encerrados_nao_podem_ser_movidos(app):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Feita', 'data_inicio': '2024-05-06'})
    agenda_service.concluir_tarefa(tarefa.id)
    db.session.commit()

    with pytest.raises(ValueError):
        agenda_service.mover_item(f'tarefa:{tarefa.id}', '2024-05-07')
    with pytest.raises(ValueError):
        agenda_service.mover_item('processo:1', '2024-05-07')


def test_mover_ocorrencia_virtual_materializa(app):
    regra = recorrencia_service.criar_recorrencia({
        'template_nome': 'Reunião de equipe', 'entidade_tipo': 'evento', 'regra_frequencia': 'semanal',
        'regra_dias_semana': [1], 'regra_hora': '09:30', 'data_inicio': '2024-05-06'
    })
    db.session.commit()

    tipo, evento = agenda_service.mover_item(f'virtual:{regra.id}:2024-05-13', '2024-05-15')
    db.session.commit()

    assert tipo == 'evento'
    assert evento.data_inicio.isoformat() == '2024-05-15T09:30:00'
    assert evento.recorrencia_data == date(2024, 5, 13)
    assert Evento.query.count() == 1

    itens = agenda_service.listar_itens('2024-05-13', '2024-05-15')
    assert [(i['id'], i['is_virtual']) for i in itens] == [(f'evento:{evento.id}', False)]


# ============================================================================
# AUDIÊNCIAS
# ============================================================================

def test_audiencia(app, processo):
    with pytest.raises(ValueError):
        agenda_service.criar_audiencia({'data_hora': '2024-06-01T14:00'})

    audiencia = agenda_service.criar_audiencia({'processo_id': processo.id, 'tipo_audiencia': 'conciliacao',
                                                'data_hora': '2024-06-01T14:00', 'forum': 'Fórum Central',
                                                'vara': '2ª Vara Cível'})
    db.session.commit()

    dados = agenda_service.item_audiencia(audiencia)
    assert dados['titulo'] == 'Audiência de conciliacao'
    assert dados['local'] == 'Fórum Central - 2ª Vara Cível'
    assert dados['data_fim'] == '2024-06-01T15:00:00'

    agenda_service.registrar_resultado_audiencia(audiencia.id, 'acordo', 'Acordo homologado')
    db.session.commit()
    assert audiencia.status == 'realizada'
