"""
Extrato financeiro unificado

Junta receitas, despesas e transferências numa única lista de linhas
uniformes, com filtros, totais e transições de status em lote.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import or_

from gestao_juridica.models import db, Receita, Despesa, Transferencia
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
from gestao_juridica.services.despesa_service import DespesaService, STATUS_PAGAVEIS
from gestao_juridica.services.listagem import paginar_lista
from gestao_juridica.services.periodos import parse_date, intervalo_preset, inicio_periodo_extrato
from gestao_juridica.services.receita_service import ReceitaService, STATUS_RECEBIVEIS

logger = logging.getLogger(__name__)

TIPOS_LINHA = ('entrada', 'saida', 'transferencia')
ACOES_LOTE = ('pagar', 'cancelar', 'reabrir')

STATUS_ABERTOS = ('pendente', 'atrasado', 'faturado')


def _valor(numero) -> Decimal:
    return Decimal(numero or 0)


# ============================================================================
# LINHAS DO EXTRATO
# ============================================================================

def linha_receita(receita: Receita) -> dict:
    valor = _valor(receita.valor)
    pago = _valor(receita.valor_pago)
    if receita.status == 'pago':
        pendente = Decimal('0')
    elif receita.status == 'parcial':
        # o restante virou uma receita de saldo, que tem linha própria
        pendente = Decimal('0')
    else:
        pendente = valor

    return {
        'id': f'receita:{receita.id}',
        'origem': 'receita',
        'origem_id': receita.id,
        'tipo': 'entrada',
        'descricao': receita.descricao,
        'categoria': receita.categoria,
        'fornecedor': None,
        'valor': float(valor),
        'data_referencia': receita.data_pagamento or receita.data_vencimento,
        'data_vencimento': receita.data_vencimento,
        'data_pagamento': receita.data_pagamento,
        'status': receita.status,
        'conta_bancaria_id': receita.conta_bancaria_id,
        'cliente_id': receita.cliente_id,
        'processo_id': receita.processo_id,
        'valor_pago': float(pago),
        'valor_pendente': float(pendente)
    }


def linha_despesa(despesa: Despesa) -> dict:
    valor = _valor(despesa.valor)
    pago = valor if despesa.status == 'pago' else Decimal('0')
    return {
        'id': f'despesa:{despesa.id}',
        'origem': 'despesa',
        'origem_id': despesa.id,
        'tipo': 'saida',
        'descricao': despesa.descricao,
        'categoria': despesa.categoria,
        'fornecedor': despesa.fornecedor,
        'valor': float(valor),
        'data_referencia': despesa.data_pagamento or despesa.data_vencimento,
        'data_vencimento': despesa.data_vencimento,
        'data_pagamento': despesa.data_pagamento,
        'status': despesa.status,
        'conta_bancaria_id': despesa.conta_bancaria_id,
        'cliente_id': despesa.cliente_id,
        'processo_id': despesa.processo_id,
        'valor_pago': float(pago),
        'valor_pendente': float(valor - pago)
    }


def linhas_transferencia(transferencia: Transferencia) -> list:
    """As duas pernas da transferência: saída na origem e entrada no destino"""
    linhas = []
    for perna, conta_id, outra in (('saida', transferencia.conta_origem_id, transferencia.conta_destino),
                                   ('entrada', transferencia.conta_destino_id, transferencia.conta_origem)):
        sentido = 'para' if perna == 'saida' else 'de'
        linhas.append({
            'id': f'transferencia:{transferencia.id}',
            'origem': 'transferencia',
            'origem_id': transferencia.id,
            'tipo': 'transferencia',
            'perna': perna,
            'descricao': transferencia.descricao or f'Transferência {sentido} {outra.banco if outra else "outra conta"}',
            'categoria': 'transferencia',
            'fornecedor': None,
            'valor': float(_valor(transferencia.valor)),
            'data_referencia': transferencia.data_transferencia,
            'data_vencimento': transferencia.data_transferencia,
            'data_pagamento': transferencia.data_transferencia,
            'status': 'pago',
            'conta_bancaria_id': conta_id,
            'cliente_id': None,
            'processo_id': None,
            'valor_pago': float(_valor(transferencia.valor)),
            'valor_pendente': 0.0
        })
    return linhas


def _serializar(linha: dict) -> dict:
    dados = dict(linha)
    for campo in ('data_referencia', 'data_vencimento', 'data_pagamento'):
        if dados[campo]:
            dados[campo] = dados[campo].isoformat()
    return dados


# ============================================================================
# FILTROS E TOTAIS
# ============================================================================

def _intervalo(filtros: dict, hoje: date) -> tuple[date | None, date | None]:
    """Datas explícitas têm prioridade sobre preset, que tem prioridade sobre período"""
    inicio = parse_date(filtros.get('data_inicio'))
    fim = parse_date(filtros.get('data_fim'))
    if inicio or fim:
        return inicio, fim
    if filtros.get('preset'):
        return intervalo_preset(filtros['preset'], hoje)
    return inicio_periodo_extrato(filtros.get('periodo'), hoje), None


def _passa_filtros(linha: dict, filtros: dict, inicio, fim) -> bool:
    tipo = filtros.get('tipo')
    if tipo and tipo != 'todos' and linha['tipo'] != tipo:
        return False
    if filtros.get('status') and linha['status'] != filtros['status']:
        return False
    if filtros.get('conta_bancaria_id') and linha['conta_bancaria_id'] != int(filtros['conta_bancaria_id']):
        return False
    if inicio and linha['data_referencia'] < inicio:
        return False
    if fim and linha['data_referencia'] > fim:
        return False

    busca = (filtros.get('busca') or '').strip().lower()
    if busca:
        texto = ' '.join(str(linha[c] or '') for c in ('descricao', 'fornecedor', 'categoria')).lower()
        if busca not in texto:
            return False
    return True


def calcular_totais(linhas: list) -> dict:
    """
    Totais do conjunto filtrado

    Entradas e saídas somam o que foi efetivamente pago; transferências
    não alteram o saldo do escritório.
    """
    entradas = saidas = pendente_receber = pendente_pagar = atrasado = Decimal('0')
    for linha in linhas:
        pago = Decimal(str(linha['valor_pago']))
        pendente = Decimal(str(linha['valor_pendente']))
        if linha['tipo'] == 'entrada':
            entradas += pago
            pendente_receber += pendente
        elif linha['tipo'] == 'saida':
            saidas += pago
            pendente_pagar += pendente
        if linha['status'] == 'atrasado':
            atrasado += pendente

    return {
        'total_entradas': float(entradas),
        'total_saidas': float(saidas),
        'saldo': float(entradas - saidas),
        'total_pendente_receber': float(pendente_receber),
        'total_pendente_pagar': float(pendente_pagar),
        'total_atrasado': float(atrasado)
    }


def montar_extrato(filtros: dict | None = None, pagina: int = 1, por_pagina: int = 50,
                   hoje: date | None = None) -> dict:
    """
    Extrato unificado de receitas, despesas e transferências

    Args:
        filtros: tipo, status, conta_bancaria_id, periodo, preset,
            data_inicio, data_fim, busca

    Returns:
        dict: itens paginados, dados de paginação e totais do conjunto filtrado
    """
    filtros = filtros or {}
    hoje = hoje or date.today()

    tipo = filtros.get('tipo')
    if tipo and tipo != 'todos' and tipo not in TIPOS_LINHA:
        raise ValueError(f'Tipo inválido. Use um dos seguintes: todos, {", ".join(TIPOS_LINHA)}')
    inicio, fim = _intervalo(filtros, hoje)

    linhas = []
    receitas = Receita.query.filter(
        Receita.status != 'cancelado',
        or_(Receita.parcelado.is_(False), Receita.parcelado.is_(None))
    )
    linhas.extend(linha_receita(r) for r in receitas)
    linhas.extend(linha_despesa(d) for d in Despesa.query.filter(Despesa.status != 'cancelado'))
    for transferencia in Transferencia.query:
        linhas.extend(linhas_transferencia(transferencia))

    linhas = [linha for linha in linhas if _passa_filtros(linha, filtros, inicio, fim)]
    linhas.sort(key=lambda linha: (linha['data_referencia'], linha['origem_id']), reverse=True)

    resultado = paginar_lista(linhas, pagina, por_pagina)
    resultado['itens'] = [_serializar(linha) for linha in resultado['itens']]
    resultado['totais'] = calcular_totais(linhas)
    return resultado


# ============================================================================
# TRANSIÇÕES EM LOTE
# ============================================================================

def _parse_id(identificador: str) -> tuple[str | None, int | None]:
    partes = str(identificador).split(':')
    if len(partes) < 2 or not partes[1].isdigit():
        return None, None
    return partes[0], int(partes[1])


def _reabrir(registro, hoje: date) -> None:
    atrasado = registro.data_vencimento < hoje
    registro.status = 'atrasado' if atrasado else 'pendente'
    if isinstance(registro, Receita):
        registro.dias_atraso = (hoje - registro.data_vencimento).days if atrasado else 0
        if registro.parcelado:
            for parcela in registro.parcelas.filter(Receita.status == 'cancelado'):
                _reabrir(parcela, hoje)


def _motivo_bloqueio(registro, acao: str) -> str | None:
    """Motivo pelo qual a ação não se aplica ao status atual (None = permitido)"""
    status = registro.status
    if acao == 'reabrir':
        return None if status == 'cancelado' else f'status {status} não pode ser reaberto'

    if isinstance(registro, Receita):
        if registro.parcelado:
            return 'agrupador de parcelas: selecione as parcelas'
        permitidos = STATUS_RECEBIVEIS
    else:
        permitidos = STATUS_PAGAVEIS
    if status not in permitidos:
        verbo = 'paga' if acao == 'pagar' else 'cancelada'
        return f'status {status} não pode ser {verbo}'
    return None


def transicionar_em_lote(ids, acao: str, dados: dict | None = None, hoje: date | None = None) -> dict:
    """
    Aplica pagar/cancelar/reabrir a uma seleção de linhas do extrato

    Linhas cuja transição não é permitida são ignoradas e reportadas com o
    motivo. Não faz commit.

    Returns:
        dict: processados (ids) e ignorados ({id, motivo})
    """
    dados = dados or {}
    hoje = hoje or date.today()

    if acao not in ACOES_LOTE:
        raise ValueError(f'Ação inválida. Use uma das seguintes: {", ".join(ACOES_LOTE)}')
    if not ids:
        raise ValueError('Nenhum item selecionado')
    if acao == 'pagar':
        if not dados.get('conta_bancaria_id'):
            raise ValueError('Conta bancária é obrigatória')
        ContaBancariaService.obter_ativa(dados['conta_bancaria_id'])

    processados = []
    ignorados = []

    for identificador in ids:
        origem, registro_id = _parse_id(identificador)
        if origem == 'transferencia':
            ignorados.append({'id': identificador, 'motivo': 'transferências não mudam de status'})
            continue

        modelo = {'receita': Receita, 'despesa': Despesa}.get(origem)
        registro = db.session.get(modelo, registro_id) if modelo else None
        if not registro:
            ignorados.append({'id': identificador, 'motivo': 'não encontrado'})
            continue

        motivo = _motivo_bloqueio(registro, acao)
        if motivo:
            ignorados.append({'id': identificador, 'motivo': motivo})
            continue

        try:
            if acao == 'reabrir':
                _reabrir(registro, hoje)
            elif origem == 'receita':
                if acao == 'pagar':
                    ReceitaService.receber(registro.id, dados, commit=False)
                else:
                    ReceitaService.cancelar(registro.id, commit=False)
            else:
                if acao == 'pagar':
                    DespesaService.pagar(registro.id, dados, commit=False)
                else:
                    DespesaService.cancelar(registro.id, commit=False)
        except ValueError as e:
            ignorados.append({'id': identificador, 'motivo': str(e)})
            continue

        processados.append(identificador)

    db.session.flush()
    logger.info('Lote %s: %s processados, %s ignorados', acao, len(processados), len(ignorados))
    return {'acao': acao, 'processados': processados, 'ignorados': ignorados}


# ============================================================================
# ATRASOS
# ============================================================================

def atualizar_atrasos(hoje: date | None = None) -> dict:
    """
    Marca como 'atrasado' receitas e despesas pendentes vencidas e
    recalcula os dias de atraso das receitas. Não faz commit.
    """
    hoje = hoje or date.today()

    receitas = Receita.query.filter(
        Receita.status.in_(('pendente', 'atrasado')),
        Receita.data_vencimento < hoje,
        or_(Receita.parcelado.is_(False), Receita.parcelado.is_(None))
    ).all()
    receitas_marcadas = 0
    for receita in receitas:
        if receita.status == 'pendente':
            receita.status = 'atrasado'
            receitas_marcadas += 1
        receita.dias_atraso = (hoje - receita.data_vencimento).days

    despesas_marcadas = Despesa.query.filter(
        Despesa.status == 'pendente',
        Despesa.data_vencimento < hoje
    ).update({'status': 'atrasado'}, synchronize_session=False)

    db.session.flush()
    logger.info('Atrasos atualizados: %s receitas, %s despesas', receitas_marcadas, despesas_marcadas)
    return {
        'receitas_atrasadas': receitas_marcadas,
        'receitas_atualizadas': len(receitas),
        'despesas_atrasadas': despesas_marcadas
    }
