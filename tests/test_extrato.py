from datetime import date

import pytest

from gestao_juridica.models import db, Despesa, Receita
from gestao_juridica.services import extrato_service
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
from gestao_juridica.services.despesa_service import DespesaService
from gestao_juridica.services.receita_service import ReceitaService

HOJE = date(2024, 5, 10)


@pytest.fixture
def movimento(cliente, conta, conta_secundaria):
    recebida = ReceitaService.criar({'descricao': 'Honorários iniciais', 'valor': 500,
                                     'data_vencimento': '2024-05-01', 'cliente_id': cliente.id})
    ReceitaService.receber(recebida.id, {'conta_bancaria_id': conta.id, 'data_pagamento': '2024-05-02'})
    pendente = ReceitaService.criar({'descricao': 'Consulta', 'valor': 200, 'data_vencimento': '2024-05-03',
                                     'cliente_id': cliente.id})
    paga = DespesaService.criar({'descricao': 'Guia de custas', 'valor': 150, 'categoria': 'custas',
                                 'data_vencimento': '2024-05-04'})
    DespesaService.pagar(paga.id, {'conta_bancaria_id': conta.id, 'data_pagamento': '2024-05-04'})
    transferencia = ContaBancariaService.transferir({'conta_origem_id': conta.id,
                                                     'conta_destino_id': conta_secundaria.id,
                                                     'valor': 100, 'data_transferencia': '2024-05-05'})
    return {'recebida': recebida, 'pendente': pendente, 'paga': paga, 'transferencia': transferencia,
            'conta': conta, 'conta_secundaria': conta_secundaria}


def _ids(resultado):
    return [linha['id'] for linha in resultado['itens']]


def test_extrato_unificado(movimento):
    resultado = extrato_service.montar_extrato(hoje=HOJE)
    t = movimento['transferencia'].id

    assert _ids(resultado) == [f'transferencia:{t}', f'transferencia:{t}', f'despesa:{movimento["paga"].id}',
                               f'receita:{movimento["pendente"].id}', f'receita:{movimento["recebida"].id}']
    assert [linha['perna'] for linha in resultado['itens'][:2]] == ['saida', 'entrada']
    assert resultado['itens'][-1]['data_referencia'] == '2024-05-02'

    assert resultado['totais'] == {
        'total_entradas': 500.0,
        'total_saidas': 150.0,
        'saldo': 350.0,
        'total_pendente_receber': 200.0,
        'total_pendente_pagar': 0.0,
        'total_atrasado': 0.0
    }


def test_filtros_do_extrato(movimento):
    transferencias = extrato_service.montar_extrato({'tipo': 'transferencia'}, hoje=HOJE)
    assert transferencias['total'] == 2
    assert transferencias['totais']['total_entradas'] == 0.0

    da_conta = extrato_service.montar_extrato({'conta_bancaria_id': str(movimento['conta_secundaria'].id)},
                                              hoje=HOJE)
    assert [linha['perna'] for linha in da_conta['itens']] == ['entrada']

    intervalo = extrato_service.montar_extrato({'data_inicio': '2024-05-03', 'data_fim': '2024-05-04',
                                                'preset': 'hoje'}, hoje=HOJE)
    assert _ids(intervalo) == [f'despesa:{movimento["paga"].id}', f'receita:{movimento["pendente"].id}']

    assert extrato_service.montar_extrato({'preset': 'hoje'}, hoje=date(2024, 5, 5))['total'] == 2
    assert extrato_service.montar_extrato({'periodo': 'semana'}, hoje=date(2024, 5, 10))['total'] == 4
    assert _ids(extrato_service.montar_extrato({'busca': 'CUSTAS'}, hoje=HOJE)) == \
        [f'despesa:{movimento["paga"].id}']

    with pytest.raises(ValueError):
        extrato_service.montar_extrato({'tipo': 'estorno'}, hoje=HOJE)


def test_paginacao_mantem_totais_do_conjunto(movimento):
    resultado = extrato_service.montar_extrato(pagina=2, por_pagina=2, hoje=HOJE)
    assert resultado['total'] == 5
    assert resultado['total_paginas'] == 3
    assert len(resultado['itens']) == 2
    assert resultado['totais']['total_entradas'] == 500.0


def test_recebimento_parcial_no_extrato(cliente, conta):
    receita = ReceitaService.criar({'descricao': 'Parecer', 'valor': 1000, 'data_vencimento': '2024-05-01',
                                    'cliente_id': cliente.id})
    ReceitaService.receber_parcial(receita.id, {'conta_bancaria_id': conta.id, 'valor_pago': 400,
                                                'data_pagamento': '2024-05-02',
                                                'nova_data_vencimento': '2024-06-01'})

    totais = extrato_service.montar_extrato(hoje=HOJE)['totais']
    assert totais['total_entradas'] == 400.0
    assert totais['total_pendente_receber'] == 600.0


# ============================================================================
# TRANSIÇÕES EM LOTE
# ============================================================================

def test_pagar_em_lote(movimento):
    conta = movimento['conta']
    aberta = DespesaService.criar({'descricao': 'Correios', 'valor': 30, 'categoria': 'correios',
                                   'data_vencimento': '2024-05-08'})
    ids = [f'receita:{movimento["pendente"].id}', f'despesa:{aberta.id}',
           f'transferencia:{movimento["transferencia"].id}', 'receita:999', f'despesa:{movimento["paga"].id}']

    resultado = extrato_service.transicionar_em_lote(ids, 'pagar', {'conta_bancaria_id': conta.id}, HOJE)
    db.session.commit()

    assert resultado['processados'] == ids[:2]
    motivos = {item['id']: item['motivo'] for item in resultado['ignorados']}
    assert motivos[ids[2]] == 'transferências não mudam de status'
    assert motivos['receita:999'] == 'não encontrado'
    assert motivos[ids[4]] == 'status pago não pode ser paga'

    assert db.session.get(Receita, movimento['pendente'].id).status == 'pago'
    assert db.session.get(Despesa, aberta.id).status == 'pago'


def test_lote_valida_acao_e_conta(movimento):
    ids = [f'receita:{movimento["pendente"].id}']
    with pytest.raises(ValueError):
        extrato_service.transicionar_em_lote(ids, 'estornar')
    with pytest.raises(ValueError):
        extrato_service.transicionar_em_lote(ids, 'pagar', {})
    with pytest.raises(ValueError):
        extrato_service.transicionar_em_lote([], 'cancelar')


def test_cancelar_e_reabrir_em_lote(movimento):
    despesa = DespesaService.criar({'descricao': 'Cópias', 'valor': 12, 'categoria': 'copia',
                                    'data_vencimento': '2024-05-08'})
    ids = [f'despesa:{despesa.id}', f'receita:{movimento["pendente"].id}']

    extrato_service.transicionar_em_lote(ids, 'cancelar', hoje=HOJE)
    db.session.commit()
    assert despesa.status == 'cancelado'

    resultado = extrato_service.transicionar_em_lote(ids + [f'receita:{movimento["recebida"].id}'], 'reabrir',
                                                     hoje=HOJE)
    db.session.commit()

    assert resultado['processados'] == ids
    assert resultado['ignorados'][0]['motivo'] == 'status pago não pode ser reaberto'
    assert despesa.status == 'atrasado'
    receita = db.session.get(Receita, movimento['pendente'].id)
    assert receita.status == 'atrasado'
    assert receita.dias_atraso == 7


def test_atualizar_atrasos(movimento):
    despesa = DespesaService.criar({'descricao': 'Perícia', 'valor': 800, 'categoria': 'honorarios_perito',
                                    'data_vencimento': '2024-05-06'})
    futura = DespesaService.criar({'descricao': 'Aluguel', 'valor': 3000, 'categoria': 'aluguel',
                                   'data_vencimento': '2024-05-20'})

    resultado = extrato_service.atualizar_atrasos(date(2024, 5, 13))
    db.session.commit()

    assert resultado == {'receitas_atrasadas': 1, 'receitas_atualizadas': 1, 'despesas_atrasadas': 1}
    assert movimento['pendente'].status == 'atrasado'
    assert movimento['pendente'].dias_atraso == 10
    assert despesa.status == 'atrasado'
    assert futura.status == 'pendente'

    totais = extrato_service.montar_extrato(hoje=date(2024, 5, 13))['totais']
    assert totais['total_atrasado'] == 1000.0
