from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

PRESETS = ('hoje', 'ultimos_7_dias', 'ultimos_14_dias', 'ultimos_30_dias',
           'esta_semana', 'este_mes', 'mes_passado')

PERIODOS_EXTRATO = ('semana', 'mes', 'trimestre', 'todos')


def parse_date(value) -> date | None:
    """Aceita date, datetime ou string ISO; retorna None para vazio"""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)[:10]).date()
    except ValueError:
        raise ValueError(f'Data inválida: {value}. Use o formato AAAA-MM-DD')


def ultimo_dia_mes(ano: int, mes: int) -> int:
    return calendar.monthrange(ano, mes)[1]


def primeiro_dia_mes(d: date) -> date:
    return d.replace(day=1)


def inicio_semana(d: date) -> date:
    """Semana brasileira: começa no domingo"""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def intervalo_preset(nome: str, hoje: date | None = None) -> tuple[date, date]:
    """
    Intervalo (inicio, fim) inclusivo de um preset de período

    Raises:
        ValueError: Preset desconhecido
    """
    hoje = hoje or date.today()

    if nome == 'hoje':
        return hoje, hoje
    if nome in ('ultimos_7_dias', 'ultimos_14_dias', 'ultimos_30_dias'):
        dias = int(nome.split('_')[1])
        return hoje - timedelta(days=dias - 1), hoje
    if nome == 'esta_semana':
        inicio = inicio_semana(hoje)
        return inicio, inicio + timedelta(days=6)
    if nome == 'este_mes':
        return primeiro_dia_mes(hoje), hoje.replace(day=ultimo_dia_mes(hoje.year, hoje.month))
    if nome == 'mes_passado':
        inicio = primeiro_dia_mes(hoje) - relativedelta(months=1)
        return inicio, inicio.replace(day=ultimo_dia_mes(inicio.year, inicio.month))

    raise ValueError(f'Período inválido. Use um dos seguintes: {", ".join(PRESETS)}')


def inicio_periodo_extrato(periodo: str | None, hoje: date | None = None) -> date | None:
    """Data inicial dos filtros rápidos do extrato (None = sem limite)"""
    hoje = hoje or date.today()
    if not periodo or periodo == 'todos':
        return None
    if periodo == 'semana':
        return hoje - timedelta(days=7)
    if periodo == 'mes':
        return hoje - relativedelta(months=1)
    if periodo == 'trimestre':
        return hoje - relativedelta(months=3)
    raise ValueError(f'Período inválido. Use um dos seguintes: {", ".join(PERIODOS_EXTRATO)}')


def intervalo_mes(referencia: str | None, hoje: date | None = None) -> tuple[date, date]:
    """Converte 'AAAA-MM' no intervalo do mês (padrão: mês atual)"""
    hoje = hoje or date.today()
    if referencia:
        try:
            ano, mes = (int(parte) for parte in referencia.split('-')[:2])
            inicio = date(ano, mes, 1)
        except (TypeError, ValueError):
            raise ValueError('Mês inválido. Use o formato AAAA-MM')
    else:
        inicio = primeiro_dia_mes(hoje)
    return inicio, inicio.replace(day=ultimo_dia_mes(inicio.year, inicio.month))
