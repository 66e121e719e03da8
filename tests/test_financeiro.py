from datetime import date
from decimal import Decimal

import pytest

from gestao_juridica.models import db, Lancamento, Receita
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
from gestao_juridica.services.despesa_service import DespesaService
from gestao_juridica.services.receita_service import ReceitaService, dividir_valor


def test_dividir_valor_fecha_o_total():
    valores = dividir_valor(100, 3)
    assert valores == [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]
    assert sum(valores) == Decimal('100')

    with pytest.raises(ValueError):
        dividir_valor(100, 0)


# ============================================================================
# CONTAS BANCÁRIAS
# ============================================================================

def test_conta_com_saldo_inicial(conta):
    assert conta.saldo_atual == Decimal('1000.00')
    assert conta.conta_principal is True

    lancamento = Lancamento.query.filter_by(conta_bancaria_id=conta.id).one()
    assert lancamento.descricao == 'Saldo inicial'
    assert lancamento.saldo_apos_lancamento == Decimal('1000.00')


def test_transferencia_entre_contas(conta, conta_secundaria):
    ContaBancariaService.transferir({'conta_origem_id': conta.id, 'conta_destino_id': conta_secundaria.id,
                                     'valor': 300, 'data_transferencia': '2024-05-02'})

    assert conta.saldo_atual == Decimal('700.00')
    assert conta_secundaria.saldo_atual == Decimal('300.00')
    assert ContaBancariaService.saldo_total() == 1000.0

    with pytest.raises(ValueError):
        ContaBancariaService.transferir({'conta_origem_id': conta.id, 'conta_destino_id': conta.id, 'valor': 10})

    ContaBancariaService.inativar(conta_secundaria.id)
    with pytest.raises(ValueError):
        ContaBancariaService.transferir({'conta_origem_id': conta.id, 'conta_destino_id': conta_secundaria.id,
                                         'valor': 10})


def test_lancamento_manual(conta):
    ContaBancariaService.lancar_manual(conta.id, {'tipo': 'saida', 'valor': '25.90', 'descricao': 'Tarifa'})
    assert conta.saldo_atual == Decimal('974.10')

    with pytest.raises(ValueError):
        ContaBancariaService.lancar_manual(conta.id, {'tipo': 'estorno', 'valor': 10, 'descricao': 'X'})
    db.session.rollback()

    assert len(ContaBancariaService.listar_lancamentos(conta.id)) == 2


# ============================================================================
# RECEITAS
# ============================================================================

def test_receita_parcelada(cliente):
    agrupador = ReceitaService.criar({'descricao': 'Honorários', 'valor': 1000, 'data_vencimento': '2024-01-31',
                                      'cliente_id': cliente.id, 'parcelado': True, 'numero_parcelas': 3})

    parcelas = agrupador.parcelas.all()
    assert [p.valor for p in parcelas] == [Decimal('333.33'), Decimal('333.33'), Decimal('333.34')]
    assert [p.data_vencimento for p in parcelas] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
    assert parcelas[1].descricao == 'Honorários (2/3)'

    # o agrupador não aparece na listagem padrão
    assert ReceitaService.listar()['total'] == 3
    assert ReceitaService.listar({'incluir_agrupadas': True})['total'] == 4


def test_receber_exige_conta_e_lanca_entrada(cliente, conta):
    receita = ReceitaService.criar({'descricao': 'Consulta', 'valor': 500, 'data_vencimento': '2024-05-01',
                                    'cliente_id': cliente.id})

    with pytest.raises(ValueError):
        ReceitaService.receber(receita.id, {})

    ReceitaService.receber(receita.id, {'conta_bancaria_id': conta.id, 'data_pagamento': '2024-05-04'})
    assert receita.status == 'pago'
    assert receita.dias_atraso == 3
    assert conta.saldo_atual == Decimal('1500.00')

    with pytest.raises(ValueError):
        ReceitaService.receber(receita.id, {'conta_bancaria_id': conta.id})


def test_recebimento_parcial_gera_saldo(cliente, conta):
    receita = ReceitaService.criar({'descricao': 'Parecer', 'valor': 1000, 'data_vencimento': '2024-05-01',
                                    'cliente_id': cliente.id})

    with pytest.raises(ValueError):
        ReceitaService.receber_parcial(receita.id, {'conta_bancaria_id': conta.id, 'valor_pago': 400})

    saldo = ReceitaService.receber_parcial(receita.id, {'conta_bancaria_id': conta.id, 'valor_pago': 400,
                                                        'nova_data_vencimento': '2024-06-01'})

    assert receita.status == 'parcial'
    assert receita.valor_pago == Decimal('400.00')
    assert saldo.tipo == 'saldo'
    assert saldo.valor == Decimal('600.00')
    assert saldo.receita_origem_id == receita.id
    assert saldo.data_vencimento == date(2024, 6, 1)
    assert conta.saldo_atual == Decimal('1400.00')

    # valor menor que o total no recebimento integral é recusado
    with pytest.raises(ValueError):
        ReceitaService.receber(saldo.id, {'conta_bancaria_id': conta.id, 'valor_pago': 100})


def test_agrupador_nao_e_recebido_e_cancela_parcelas_abertas(cliente, conta):
    agrupador = ReceitaService.criar({'descricao': 'Honorários', 'valor': 900, 'data_vencimento': '2024-01-10',
                                      'cliente_id': cliente.id, 'parcelado': True, 'numero_parcelas': 3})
    primeira = agrupador.parcelas.first()

    with pytest.raises(ValueError):
        ReceitaService.receber(agrupador.id, {'conta_bancaria_id': conta.id})

    ReceitaService.receber(primeira.id, {'conta_bancaria_id': conta.id})
    ReceitaService.cancelar(agrupador.id)

    assert [p.status for p in agrupador.parcelas] == ['pago', 'cancelado', 'cancelado']


def test_gerar_receitas_recorrentes(cliente):
    modelo = ReceitaService.criar({'descricao': 'Assessoria mensal', 'valor': 1500, 'data_vencimento': '2024-01-10',
                                   'cliente_id': cliente.id, 'recorrente': True,
                                   'config_recorrencia': {'frequencia': 'mensal'}})

    criadas = ReceitaService.gerar_recorrentes('2024-04-15')
    assert [r.data_vencimento for r in criadas] == [date(2024, 2, 10), date(2024, 3, 10), date(2024, 4, 10)]
    assert all(r.receita_recorrente_id == modelo.id for r in criadas)

    assert ReceitaService.gerar_recorrentes('2024-04-15') == []

    with pytest.raises(ValueError):
        ReceitaService.criar({'descricao': 'X', 'valor': 10, 'data_vencimento': '2024-01-10', 'recorrente': True,
                              'parcelado': True, 'numero_parcelas': 2})


def test_receita_herda_cliente_do_processo(processo):
    receita = ReceitaService.criar({'descricao': 'Êxito', 'valor': 2000, 'data_vencimento': '2024-05-01',
                                    'processo_id': processo.id, 'categoria': 'exito'})
    assert receita.cliente_id == processo.cliente_id
    assert Receita.query.count() == 1


# ============================================================================
# DESPESAS
# ============================================================================

def test_pagar_despesa(processo, conta):
    despesa = DespesaService.criar({'descricao': 'Guia de custas', 'valor': 180.5, 'categoria': 'custas',
                                    'data_vencimento': '2024-05-05', 'processo_id': processo.id,
                                    'fornecedor': 'TJSP'})
    assert despesa.cliente_id == processo.cliente_id

    with pytest.raises(ValueError):
        DespesaService.pagar(despesa.id, {})

    DespesaService.pagar(despesa.id, {'conta_bancaria_id': conta.id, 'forma_pagamento': 'pix'})
    assert despesa.status == 'pago'
    assert conta.saldo_atual == Decimal('819.50')

    lancamento = Lancamento.query.filter_by(origem_tipo='despesa', origem_id=despesa.id).one()
    assert lancamento.descricao == 'TJSP - Guia de custas'

    with pytest.raises(ValueError):
        DespesaService.cancelar(despesa.id)
