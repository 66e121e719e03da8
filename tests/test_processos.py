from datetime import date, datetime, timedelta

import pytest

from gestao_juridica.models import db
from gestao_juridica.services import agenda_service
from gestao_juridica.services.contrato_service import ContratoService
from gestao_juridica.services.processo_service import ProcessoService

CNJ_VALIDO = '0000001-78.2020.8.26.0100'


def test_numero_de_pasta_sequencial(cliente):
    assert ProcessoService.proximo_numero_pasta() == '0001'
    primeiro = ProcessoService.criar({'cliente_id': cliente.id})
    segundo = ProcessoService.criar({'cliente_id': cliente.id})
    assert (primeiro.numero_pasta, segundo.numero_pasta) == ('0001', '0002')

    with pytest.raises(ValueError):
        ProcessoService.criar({'cliente_id': cliente.id, 'numero_pasta': '0001'})


def test_numero_cnj(cliente):
    processo = ProcessoService.criar({'cliente_id': cliente.id, 'numero_cnj': '00000017820208260100'})
    assert processo.numero_cnj == CNJ_VALIDO

    with pytest.raises(ValueError, match='Já existe'):
        ProcessoService.criar({'cliente_id': cliente.id, 'numero_cnj': CNJ_VALIDO})
    with pytest.raises(ValueError, match='Esperado: 78'):
        ProcessoService.criar({'cliente_id': cliente.id, 'numero_cnj': '0000001-79.2020.8.26.0100'})


def test_validacoes_do_cadastro(cliente, outro_cliente):
    contrato = ContratoService.criar({'cliente_id': outro_cliente.id, 'titulo': 'Consultoria',
                                      'forma_cobranca': 'por_hora', 'valor_hora': 350})

    with pytest.raises(ValueError):
        ProcessoService.criar({})
    with pytest.raises(ValueError, match='outro cliente'):
        ProcessoService.criar({'cliente_id': cliente.id, 'contrato_id': contrato.id})
    with pytest.raises(ValueError):
        ProcessoService.criar({'cliente_id': cliente.id, 'area': 'espacial'})
    with pytest.raises(ValueError):
        ProcessoService.criar({'cliente_id': cliente.id, 'status': 'arquivado'})


def _cenario(cliente, outro_cliente):
    hoje = date.today()
    critico = ProcessoService.criar({'cliente_id': cliente.id, 'area': 'trabalhista'})
    arquivado = ProcessoService.criar({'cliente_id': cliente.id, 'area': 'civel'})
    tranquilo = ProcessoService.criar({'cliente_id': outro_cliente.id, 'area': 'civel'})

    agenda_service.criar_tarefa({'titulo': 'Recurso ordinário', 'processo_id': critico.id,
                                 'data_inicio': hoje.isoformat(),
                                 'prazo_data_limite': (hoje + timedelta(days=3)).isoformat()})
    agenda_service.criar_tarefa({'titulo': 'Réplica', 'processo_id': tranquilo.id,
                                 'data_inicio': hoje.isoformat(),
                                 'prazo_data_limite': (hoje + timedelta(days=20)).isoformat()})
    db.session.commit()
    ProcessoService.encerrar(arquivado.id, {})
    return hoje, critico, arquivado, tranquilo


def test_visoes_e_contadores(cliente, outro_cliente):
    hoje, critico, arquivado, tranquilo = _cenario(cliente, outro_cliente)

    assert ProcessoService.contadores(hoje) == {'todos': 3, 'ativos': 2, 'criticos': 1, 'arquivados': 1}

    criticos = ProcessoService.listar('criticos', hoje=hoje)
    assert [p['id'] for p in criticos['itens']] == [critico.id]
    assert criticos['itens'][0]['tem_prazo_critico'] is True

    arquivados = ProcessoService.listar('arquivados', hoje=hoje)
    assert arquivados['itens'][0]['encerrado'] is True
    assert arquivados['itens'][0]['status_label'] == 'Arquivado'

    with pytest.raises(ValueError):
        ProcessoService.listar('favoritos')


def test_busca_filtros_e_ordenacao(cliente, outro_cliente):
    hoje, critico, arquivado, tranquilo = _cenario(cliente, outro_cliente)

    busca = ProcessoService.listar('todos', busca='Horizonte', hoje=hoje)
    assert [p['id'] for p in busca['itens']] == [tranquilo.id]

    civeis = ProcessoService.listar('todos', filtros={'area': 'civel'}, ordenar_por='numero_pasta',
                                    direcao='asc', hoje=hoje)
    assert [p['numero_pasta'] for p in civeis['itens']] == ['0002', '0003']

    with pytest.raises(ValueError):
        ProcessoService.listar('todos', ordenar_por='senha')


def test_editar_em_lote(cliente):
    ids = [ProcessoService.criar({'cliente_id': cliente.id}).id for _ in range(2)]

    assert ProcessoService.editar_em_lote(ids, {'status': 'suspenso', 'responsavel': 'Dr. Paulo'}) == 2
    assert {p['status'] for p in ProcessoService.listar('todos')['itens']} == {'suspenso'}

    with pytest.raises(ValueError):
        ProcessoService.editar_em_lote(ids, {'numero_pasta': '9999'})
    with pytest.raises(ValueError):
        ProcessoService.editar_em_lote(ids, {})
    with pytest.raises(ValueError):
        ProcessoService.editar_em_lote([], {'status': 'ativo'})


def test_encerrar_processo(processo):
    tarefa = agenda_service.criar_tarefa({'titulo': 'Memoriais', 'processo_id': processo.id,
                                          'data_inicio': date.today().isoformat()})
    audiencia = agenda_service.criar_audiencia({'processo_id': processo.id,
                                                'data_hora': (datetime.now() + timedelta(days=15)).isoformat()})
    db.session.commit()

    pendencias = ProcessoService.pendencias_encerramento(processo.id)
    assert [t['id'] for t in pendencias['tarefas']] == [tarefa.id]
    assert [a['id'] for a in pendencias['audiencias']] == [audiencia.id]

    resultado = ProcessoService.encerrar(processo.id, {
        'houve_acordo': True, 'valor_acordo': 5000, 'resultado': 'favoravel',
        'data_encerramento': '2024-05-10',
        'cancelar_tarefas_ids': [tarefa.id], 'cancelar_audiencias_ids': [audiencia.id]
    })

    assert resultado['tarefas_canceladas'] == 1
    assert resultado['audiencias_canceladas'] == 1
    assert processo.status == 'acordo'
    assert processo.data_encerramento == date(2024, 5, 10)
    assert tarefa.status == 'cancelada'
    assert audiencia.status == 'cancelada'

    with pytest.raises(ValueError):
        ProcessoService.encerrar(processo.id, {})


def test_encerrar_com_transito_em_julgado(processo):
    ProcessoService.encerrar(processo.id, {'transitou_julgado': True, 'data_encerramento': '2024-05-10'})
    assert processo.status == 'transito_julgado'
    assert processo.data_transito_julgado == date(2024, 5, 10)
