from datetime import date

import pytest

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db
from gestao_juridica.services import extrato_service
from gestao_juridica.services.contrato_service import ContratoService
from gestao_juridica.services.processo_service import ProcessoService
from gestao_juridica.services.receita_service import ReceitaService


@pytest.fixture
def contrato(cliente):
    return ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Ação de cobrança',
                                  'forma_cobranca': 'fixo', 'valor_fixo': 3000})


def test_numeracao_e_validacoes(cliente, contrato):
    assert contrato.numero_contrato == 'CONT-0001'
    assert ContratoService.proximo_numero() == 'CONT-0002'

    with pytest.raises(ValueError):
        ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Sem valor', 'forma_cobranca': 'fixo'})
    with pytest.raises(ValueError):
        ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Êxito', 'forma_cobranca': 'misto',
                               'percentual_exito': 150})
    with pytest.raises(ValueError):
        ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Mensal', 'forma_cobranca': 'misto',
                               'dia_cobranca': 32})
    with pytest.raises(ValueError):
        ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Hora', 'forma_cobranca': 'por_hora'})


def test_resumo_sem_receitas_usa_valor_fixo(contrato):
    resumo = ContratoService.resumo_financeiro(contrato)
    assert resumo['valor_total'] == 3000.0
    assert resumo['valor_pendente'] == 3000.0
    assert resumo['total_parcelas'] == 0
    assert resumo['inadimplente'] is False
    assert resumo['proxima_parcela'] is None


def test_resumo_sem_receitas_estima_horas(cliente):
    por_hora = ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Consultoria trabalhista',
                                      'forma_cobranca': 'por_hora', 'valor_hora': 200, 'horas_estimadas': 10})

    resumo = ContratoService.resumo_financeiro(por_hora)
    assert resumo['valor_total'] == 2000.0
    assert resumo['valor_pendente'] == 2000.0
    assert resumo['valor_recebido'] == 0.0


def test_proxima_parcela_ignora_honorario_avulso(contrato):
    ReceitaService.criar({'descricao': 'Honorários iniciais', 'valor': 500, 'data_vencimento': '2024-01-05',
                          'contrato_id': contrato.id})
    agrupador = ReceitaService.criar({'descricao': 'Honorários contratuais', 'valor': 3000,
                                      'data_vencimento': '2024-02-05', 'contrato_id': contrato.id,
                                      'parcelado': True, 'numero_parcelas': 3})

    proxima = ContratoService.resumo_financeiro(contrato)['proxima_parcela']
    assert proxima['tipo'] == 'parcela'
    assert proxima['id'] == agrupador.parcelas.all()[0].id


def test_resumo_com_parcelas(contrato, conta):
    agrupador = ReceitaService.criar({'descricao': 'Honorários contratuais', 'valor': 3000,
                                      'data_vencimento': '2024-01-10', 'contrato_id': contrato.id,
                                      'parcelado': True, 'numero_parcelas': 3})
    assert agrupador.tipo == 'honorario'
    assert agrupador.cliente_id == contrato.cliente_id

    primeira, segunda, _ = agrupador.parcelas.all()
    ReceitaService.receber(primeira.id, {'conta_bancaria_id': conta.id, 'data_pagamento': '2024-01-10'})
    extrato_service.atualizar_atrasos(date(2024, 2, 20))
    db.session.commit()

    resumo = ContratoService.resumo_financeiro(contrato)
    assert resumo['valor_total'] == 3000.0
    assert resumo['valor_recebido'] == 1000.0
    assert resumo['valor_pendente'] == 2000.0
    assert resumo['valor_atrasado'] == 1000.0
    assert resumo['total_parcelas'] == 3
    assert resumo['parcelas_pagas'] == 1
    assert resumo['inadimplente'] is True
    assert resumo['dias_atraso'] == 10
    assert resumo['proxima_parcela']['id'] == segunda.id

    assert [c['id'] for c in ContratoService.listar(inadimplente=True)] == [contrato.id]
    assert ContratoService.listar(inadimplente=False) == []


def test_saldo_de_recebimento_parcial_nao_duplica(contrato, conta):
    receita = ReceitaService.criar({'descricao': 'Entrada', 'valor': 1000, 'data_vencimento': '2024-01-10',
                                    'contrato_id': contrato.id})
    ReceitaService.receber_parcial(receita.id, {'conta_bancaria_id': conta.id, 'valor_pago': 400,
                                                'nova_data_vencimento': '2024-02-10'})

    resumo = ContratoService.resumo_financeiro(contrato)
    assert resumo['valor_total'] == 1000.0
    assert resumo['valor_recebido'] == 400.0
    assert resumo['valor_pendente'] == 600.0
    assert resumo['total_parcelas'] == 1


def test_vincular_processos(contrato, cliente, outro_cliente):
    processo = ProcessoService.criar({'cliente_id': cliente.id})
    de_outro = ProcessoService.criar({'cliente_id': outro_cliente.id})

    ContratoService.vincular_processo(contrato.id, processo.id)
    assert ContratoService.serializar(contrato)['total_processos'] == 1

    with pytest.raises(ValueError):
        ContratoService.vincular_processo(contrato.id, de_outro.id)

    ContratoService.desvincular_processo(contrato.id, processo.id)
    assert processo.contrato_id is None
    with pytest.raises(ValueError):
        ContratoService.desvincular_processo(contrato.id, processo.id)


def test_metricas(contrato, cliente):
    ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Consultoria', 'forma_cobranca': 'por_hora',
                           'valor_hora': 400})
    ContratoService.inativar(contrato.id)

    metricas = ContratoService.metricas()
    assert metricas['total_contratos'] == 2
    assert metricas['contratos_ativos'] == 1
    assert metricas['valor_total_contratos'] == 3000.0
    assert metricas['inadimplentes'] == 0


def test_busca_por_id(contrato, cliente):
    assert ContratoService.obter(contrato.id) is contrato
    with pytest.raises(RegistroNaoEncontrado):
        ContratoService.obter(999)
    with pytest.raises(RegistroNaoEncontrado):
        ContratoService.criar({'cliente_id': 999, 'titulo': 'Sem cliente', 'forma_cobranca': 'fixo',
                               'valor_fixo': 100})
    with pytest.raises(RegistroNaoEncontrado):
        ReceitaService.criar({'descricao': 'Sem contrato', 'valor': 100, 'data_vencimento': '2024-01-10',
                              'contrato_id': 999})
