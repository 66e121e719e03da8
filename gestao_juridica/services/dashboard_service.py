"""
Dados consolidados do painel inicial

1. Resumo financeiro do mês
2. Agenda do dia
3. Resumo da carteira de processos
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import func, or_

from gestao_juridica.models import db, Receita, Despesa, Processo
from gestao_juridica.services import agenda_service, prazo_service
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
from gestao_juridica.services.periodos import intervalo_mes
from gestao_juridica.services.processo_service import ProcessoService, STATUS

MESES = ['Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho', 'Julho',
         'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro']


def decimal_to_float(value):
    """Converte Decimal para float"""
    if value is None:
        return 0.0
    return float(value) if isinstance(value, Decimal) else value


def _nao_agrupadora():
    return or_(Receita.parcelado.is_(False), Receita.parcelado.is_(None))


# ============================================================================
# BLOCO 1: RESUMO FINANCEIRO DO MÊS
# ============================================================================

def resumo_financeiro(mes: str | None = None, hoje: date | None = None) -> dict:
    """
    Resumo do mês ('AAAA-MM', padrão: mês atual):
    - Receitas recebidas e despesas pagas no mês
    - Saldo do mês (recebido - pago)
    - A receber e a pagar com vencimento no mês
    - Inadimplência total (receitas atrasadas de qualquer mês)
    - Saldo total das contas ativas
    """
    inicio, fim = intervalo_mes(mes, hoje)

    recebido = db.session.query(func.sum(Receita.valor_pago)).filter(
        Receita.status.in_(('pago', 'parcial')),
        Receita.data_pagamento >= inicio,
        Receita.data_pagamento <= fim
    ).scalar() or 0

    pago = db.session.query(func.sum(Despesa.valor)).filter(
        Despesa.status == 'pago',
        Despesa.data_pagamento >= inicio,
        Despesa.data_pagamento <= fim
    ).scalar() or 0

    a_receber = db.session.query(func.sum(Receita.valor)).filter(
        Receita.status.in_(('pendente', 'atrasado', 'faturado')),
        _nao_agrupadora(),
        Receita.data_vencimento >= inicio,
        Receita.data_vencimento <= fim
    ).scalar() or 0

    a_pagar = db.session.query(func.sum(Despesa.valor)).filter(
        Despesa.status.in_(('pendente', 'atrasado')),
        Despesa.data_vencimento >= inicio,
        Despesa.data_vencimento <= fim
    ).scalar() or 0

    inadimplencia = db.session.query(func.sum(Receita.valor), func.count(Receita.id)).filter(
        Receita.status == 'atrasado',
        _nao_agrupadora()
    ).one()

    return {
        'mes': inicio.strftime('%Y-%m'),
        'mes_nome': f'{MESES[inicio.month - 1]}/{inicio.year}',
        'receitas_recebidas': decimal_to_float(recebido),
        'despesas_pagas': decimal_to_float(pago),
        'saldo_mes': decimal_to_float(recebido) - decimal_to_float(pago),
        'a_receber': decimal_to_float(a_receber),
        'a_pagar': decimal_to_float(a_pagar),
        'inadimplencia_total': decimal_to_float(inadimplencia[0]),
        'receitas_atrasadas': inadimplencia[1] or 0,
        'saldo_contas': ContaBancariaService.saldo_total()
    }


# ============================================================================
# BLOCO 2: AGENDA DO DIA
# ============================================================================

def agenda_do_dia(hoje: date | None = None) -> dict:
    """Itens de hoje já ordenados e contagem de prazos vencidos / vencendo hoje"""
    hoje = hoje or date.today()
    itens = agenda_service.ordenar_itens_do_dia(agenda_service.listar_itens(hoje, hoje), hoje)

    prazos = prazo_service.listar_prazos(hoje)
    return {
        'data': hoje.isoformat(),
        'itens': itens,
        'total': len(itens),
        'prazos_vencidos': sum(1 for p in prazos if p['criticidade'] == 'vencido'),
        'prazos_hoje': sum(1 for p in prazos if p['criticidade'] == 'hoje')
    }


# ============================================================================
# BLOCO 3: PROCESSOS
# ============================================================================

def processos_resumo(hoje: date | None = None) -> dict:
    """Quantidade por status e processos com prazo crítico"""
    hoje = hoje or date.today()

    por_status = {codigo: 0 for codigo in STATUS}
    for status, total in db.session.query(Processo.status, func.count(Processo.id)).group_by(Processo.status):
        por_status[status] = total

    criticos = ProcessoService.listar(visao='criticos', por_pagina=10, hoje=hoje)
    return {
        'por_status': por_status,
        'contadores': ProcessoService.contadores(hoje),
        'criticos': criticos['itens'],
        'total_criticos': criticos['total']
    }
