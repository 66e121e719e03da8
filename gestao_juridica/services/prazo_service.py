"""
Prazos processuais - contagem em dias úteis/corridos, criticidade e feriados

A contagem começa no dia seguinte à intimação. Em dias úteis, sábados,
domingos e feriados cadastrados não contam. Em dias corridos todos contam,
mas um termo final em dia não útil é prorrogado para o próximo dia útil.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from dateutil.easter import easter
from sqlalchemy import or_

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, Feriado, Tarefa
from gestao_juridica.services.periodos import parse_date

logger = logging.getLogger(__name__)

DIAS_SEMANA = ['Segunda', 'Terça', 'Quarta', 'Quinta', 'Sexta', 'Sábado', 'Domingo']

TIPOS_PRAZO = ('recurso', 'manifestacao', 'cumprimento', 'juntada', 'pagamento', 'outro')
ABRANGENCIAS = ('nacional', 'estadual', 'municipal')

CRITICIDADES = ('vencido', 'hoje', 'critico', 'urgente', 'atencao', 'normal')

STATUS_TAREFA_ABERTA = ('pendente', 'em_andamento')

FERIADOS_FIXOS = [
    ((1, 1), 'Confraternização Universal'),
    ((4, 21), 'Tiradentes'),
    ((5, 1), 'Dia do Trabalho'),
    ((9, 7), 'Independência do Brasil'),
    ((10, 12), 'Nossa Senhora Aparecida'),
    ((11, 2), 'Finados'),
    ((11, 15), 'Proclamação da República'),
    ((11, 20), 'Dia Nacional de Zumbi e da Consciência Negra'),
    ((12, 25), 'Natal'),
]


def _tipo_dia(dia: date, feriados: set) -> str:
    if dia in feriados:
        return 'feriado'
    if dia.weekday() >= 5:
        return 'fim_semana'
    return 'util'


def calcular_data_limite(data_intimacao, quantidade_dias: int, dias_uteis: bool = True,
                         feriados=None) -> dict:
    """
    Calcula o prazo fatal a partir da intimação

    Args:
        data_intimacao: Data da intimação (date ou ISO)
        quantidade_dias: Quantidade de dias do prazo (>= 1)
        dias_uteis: True conta apenas dias úteis
        feriados: Conjunto de datas não úteis

    Returns:
        dict: data_limite, linha do tempo dia a dia e contadores

    Raises:
        ValueError: Se dados inválidos
    """
    inicio = parse_date(data_intimacao)
    if not inicio:
        raise ValueError('Data de intimação é obrigatória')
    try:
        quantidade = int(quantidade_dias)
    except (TypeError, ValueError):
        raise ValueError('Quantidade de dias inválida')
    if quantidade < 1:
        raise ValueError('Quantidade de dias deve ser maior que zero')

    feriados = set(feriados or ())
    linha_tempo = []
    contados = 0
    dia = inicio

    while contados < quantidade:
        dia += timedelta(days=1)
        tipo = _tipo_dia(dia, feriados)
        conta = tipo == 'util' or not dias_uteis
        if conta:
            contados += 1
        linha_tempo.append({
            'data': dia.isoformat(),
            'tipo': tipo,
            'dia_semana': DIAS_SEMANA[dia.weekday()],
            'contado': conta,
            'numero': contados if conta else None
        })

    # Prorrogação do termo final para o próximo dia útil
    while _tipo_dia(dia, feriados) != 'util':
        dia += timedelta(days=1)
        tipo = _tipo_dia(dia, feriados)
        linha_tempo.append({
            'data': dia.isoformat(),
            'tipo': tipo,
            'dia_semana': DIAS_SEMANA[dia.weekday()],
            'contado': False,
            'numero': None
        })

    return {
        'data_intimacao': inicio.isoformat(),
        'quantidade_dias': quantidade,
        'dias_uteis': dias_uteis,
        'data_limite': dia,
        'linha_tempo': linha_tempo,
        'dias_corridos': (dia - inicio).days,
        'dias_uteis_contados': sum(1 for d in linha_tempo if d['tipo'] == 'util'),
        'dias_feriados': sum(1 for d in linha_tempo if d['tipo'] == 'feriado'),
        'dias_fins_semana': sum(1 for d in linha_tempo if d['tipo'] == 'fim_semana')
    }


def carregar_feriados(inicio: date, fim: date, uf: str | None = None) -> set:
    """Feriados nacionais (e estaduais/municipais da UF, se informada) no intervalo"""
    query = Feriado.query.filter(Feriado.data >= inicio, Feriado.data <= fim)
    if uf:
        query = query.filter(or_(Feriado.abrangencia == 'nacional', Feriado.uf == uf.upper()))
    else:
        query = query.filter(Feriado.abrangencia == 'nacional')
    return {f.data for f in query.all()}


def calcular_prazo(data_intimacao, quantidade_dias, dias_uteis: bool = True, uf: str | None = None) -> dict:
    """calcular_data_limite usando os feriados cadastrados no banco"""
    inicio = parse_date(data_intimacao)
    if not inicio:
        raise ValueError('Data de intimação é obrigatória')
    try:
        quantidade = int(quantidade_dias)
    except (TypeError, ValueError):
        raise ValueError('Quantidade de dias inválida')
    # Margem para fins de semana e recessos
    fim = inicio + timedelta(days=quantidade * 3 + 30)
    feriados = carregar_feriados(inicio, fim, uf)
    return calcular_data_limite(inicio, quantidade, dias_uteis, feriados)


def dias_restantes(data_limite: date, hoje: date | None = None) -> int:
    return (data_limite - (hoje or date.today())).days


def criticidade(data_limite, hoje: date | None = None) -> str:
    """
    Classifica o prazo pela distância até o termo final

    vencido (<0), hoje (0), critico (1-2), urgente (3-5), atencao (6-10), normal (>10)
    """
    restantes = dias_restantes(parse_date(data_limite), hoje)
    if restantes < 0:
        return 'vencido'
    if restantes == 0:
        return 'hoje'
    if restantes <= 2:
        return 'critico'
    if restantes <= 5:
        return 'urgente'
    if restantes <= 10:
        return 'atencao'
    return 'normal'


def listar_prazos(hoje: date | None = None, nivel: str | None = None, processo_id: int | None = None) -> list:
    """
    Tarefas em aberto com prazo fatal, ordenadas pelo prazo

    Args:
        nivel: Filtra por criticidade (vencido, hoje, critico...)
    """
    hoje = hoje or date.today()
    if nivel and nivel not in CRITICIDADES:
        raise ValueError(f'Criticidade inválida. Use uma das seguintes: {", ".join(CRITICIDADES)}')

    query = Tarefa.query.filter(
        Tarefa.prazo_data_limite.isnot(None),
        Tarefa.status.in_(STATUS_TAREFA_ABERTA),
        or_(Tarefa.prazo_cumprido.is_(False), Tarefa.prazo_cumprido.is_(None))
    )
    if processo_id:
        query = query.filter(Tarefa.processo_id == processo_id)

    resultado = []
    for tarefa in query.order_by(Tarefa.prazo_data_limite, Tarefa.id).all():
        item = tarefa.to_dict()
        item['dias_restantes'] = dias_restantes(tarefa.prazo_data_limite, hoje)
        item['criticidade'] = criticidade(tarefa.prazo_data_limite, hoje)
        if nivel and item['criticidade'] != nivel:
            continue
        resultado.append(item)
    return resultado


def marcar_prazo_cumprido(tarefa_id: int) -> Tarefa:
    tarefa = db.session.get(Tarefa, tarefa_id)
    if not tarefa:
        raise RegistroNaoEncontrado('Tarefa não encontrada')
    if not tarefa.prazo_data_limite:
        raise ValueError('Tarefa não possui prazo processual')

    tarefa.prazo_cumprido = True
    if tarefa.status in STATUS_TAREFA_ABERTA:
        tarefa.status = 'concluida'
        tarefa.data_conclusao = datetime.utcnow()
        tarefa.progresso_percentual = 100
    db.session.add(tarefa)
    logger.info('Prazo da tarefa %s marcado como cumprido', tarefa.id)
    return tarefa


# ============================================================================
# FERIADOS
# ============================================================================

def listar_feriados(ano: int | None = None, uf: str | None = None) -> list:
    query = Feriado.query
    if ano:
        query = query.filter(Feriado.data >= date(ano, 1, 1), Feriado.data <= date(ano, 12, 31))
    if uf:
        query = query.filter(or_(Feriado.abrangencia == 'nacional', Feriado.uf == uf.upper()))
    return query.order_by(Feriado.data).all()


def criar_feriado(dados: dict) -> Feriado:
    data = parse_date(dados.get('data'))
    if not data:
        raise ValueError('Data é obrigatória')
    if not dados.get('descricao'):
        raise ValueError('Descrição é obrigatória')

    abrangencia = dados.get('abrangencia', 'nacional')
    if abrangencia not in ABRANGENCIAS:
        raise ValueError(f'Abrangência inválida. Use uma das seguintes: {", ".join(ABRANGENCIAS)}')

    uf = (dados.get('uf') or '').upper() or None
    if abrangencia != 'nacional' and not uf:
        raise ValueError('UF é obrigatória para feriados estaduais e municipais')
    if abrangencia == 'nacional':
        uf = None

    existe = Feriado.query.filter_by(data=data, abrangencia=abrangencia, uf=uf).first()
    if existe:
        raise ValueError('Feriado já cadastrado para esta data')

    feriado = Feriado(data=data, descricao=dados['descricao'], abrangencia=abrangencia, uf=uf)
    db.session.add(feriado)
    return feriado


def remover_feriado(feriado_id: int) -> None:
    feriado = db.session.get(Feriado, feriado_id)
    if not feriado:
        raise RegistroNaoEncontrado('Feriado não encontrado')
    db.session.delete(feriado)


def feriados_nacionais(ano: int) -> list[tuple[date, str]]:
    """Feriados fixos do ano mais os móveis, calculados a partir da Páscoa"""
    pascoa = easter(ano)
    moveis = [
        (pascoa - timedelta(days=48), 'Carnaval'),
        (pascoa - timedelta(days=47), 'Carnaval'),
        (pascoa - timedelta(days=2), 'Sexta-feira Santa'),
        (pascoa + timedelta(days=60), 'Corpus Christi'),
    ]
    fixos = [(date(ano, mes, dia), descricao) for (mes, dia), descricao in FERIADOS_FIXOS]
    return sorted(fixos + moveis)


def cadastrar_feriados_nacionais(ano: int) -> int:
    """Cadastra os feriados nacionais do ano que ainda não existem; retorna quantos foram criados"""
    criados = 0
    for data, descricao in feriados_nacionais(ano):
        if Feriado.query.filter_by(data=data, abrangencia='nacional').first():
            continue
        db.session.add(Feriado(data=data, descricao=descricao, abrangencia='nacional'))
        criados += 1
    logger.info('%s feriado(s) nacional(is) de %s cadastrado(s)', criados, ano)
    return criados
