"""
Recorrências da agenda - regras de repetição de tarefas, eventos e audiências

Este serviço implementa:
1. Cálculo das datas de uma regra (diária, semanal, mensal, anual)
2. Expansão virtual das ocorrências para exibição no calendário
3. Materialização das ocorrências dentro da janela de antecedência (job diário)
4. Exclusão de "apenas esta" ocorrência ou de "todas" as futuras
5. Resumo em português da regra ("Toda semana: Segunda, Quarta às 09:00")
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta
from flask import current_app
from sqlalchemy import or_

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, Recorrencia, RecorrenciaExclusao, Tarefa, Evento, Audiencia
from gestao_juridica.services.periodos import parse_date, ultimo_dia_mes

logger = logging.getLogger(__name__)

FREQUENCIAS = ('diaria', 'semanal', 'mensal', 'anual')
ENTIDADES = ('tarefa', 'evento', 'audiencia')
ULTIMO_DIA = 99

LIMITE_AVANCO = 10000
LIMITE_DATAS = 500

NOMES_DIAS = ['Domingo', 'Segunda', 'Terça', 'Quarta', 'Quinta', 'Sexta', 'Sábado']
NOMES_MESES = ['Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho', 'Julho',
               'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro']

MODELOS = {'tarefa': Tarefa, 'evento': Evento, 'audiencia': Audiencia}

STATUS_INICIAL = {'tarefa': 'pendente', 'evento': 'agendado', 'audiencia': 'agendada'}
STATUS_FINALIZADOS = ('concluida', 'realizado', 'realizada')

CAMPOS_TEMPLATE = {
    'tarefa': ('descricao', 'tipo', 'prioridade', 'responsavel', 'processo_id', 'cor',
               'duracao_planejada_minutos'),
    'evento': ('descricao', 'local', 'responsavel', 'processo_id', 'cor'),
    'audiencia': ('tipo_audiencia', 'modalidade', 'tribunal', 'comarca', 'vara', 'forum', 'sala',
                  'link_virtual', 'juiz', 'responsavel', 'processo_id', 'observacoes'),
}


# ============================================================================
# CÁLCULO DE DATAS
# ============================================================================

def parse_hora(valor) -> time | None:
    if not valor:
        return None
    try:
        horas, minutos = str(valor).split(':')[:2]
        return time(int(horas), int(minutos))
    except (TypeError, ValueError):
        raise ValueError(f'Horário inválido: {valor}. Use o formato HH:MM')


def dia_semana(d: date) -> int:
    """0=Domingo ... 6=Sábado"""
    return (d.weekday() + 1) % 7


def _dias_semana(regra) -> list:
    return sorted({int(d) for d in (regra.regra_dias_semana or [])})


def _dia_no_mes(ano: int, mes: int, dia_alvo: int) -> date:
    ultimo = ultimo_dia_mes(ano, mes)
    dia = ultimo if dia_alvo == ULTIMO_DIA else min(dia_alvo, ultimo)
    return date(ano, mes, dia)


def _pular_fim_de_semana(d: date) -> date:
    while d.weekday() >= 5:
        d += timedelta(days=1)
    return d


def proxima_data(regra, atual: date) -> date:
    """
    Próxima ocorrência da regra depois de `atual`

    Args:
        regra: Recorrencia (ou objeto com os mesmos atributos regra_*)
        atual: Data da ocorrência atual

    Returns:
        date: Data seguinte da série
    """
    intervalo = max(int(regra.regra_intervalo or 1), 1)
    frequencia = regra.regra_frequencia

    if frequencia == 'diaria':
        proxima = atual + timedelta(days=intervalo)
        if regra.regra_apenas_uteis:
            proxima = _pular_fim_de_semana(proxima)
        return proxima

    if frequencia == 'semanal':
        dias = _dias_semana(regra)
        if not dias:
            return atual + timedelta(days=7 * intervalo)
        hoje_semana = dia_semana(atual)
        seguintes = [d for d in dias if d > hoje_semana]
        if seguintes:
            return atual + timedelta(days=seguintes[0] - hoje_semana)
        ate_domingo = 7 - hoje_semana
        return atual + timedelta(days=ate_domingo + 7 * (intervalo - 1) + dias[0])

    if frequencia == 'mensal':
        base = atual + relativedelta(months=intervalo)
        dia_alvo = regra.regra_dia_mes or regra.data_inicio.day
        return _dia_no_mes(base.year, base.month, dia_alvo)

    if frequencia == 'anual':
        base = atual + relativedelta(years=intervalo)
        mes = regra.regra_mes or base.month
        dia_alvo = regra.regra_dia_mes or regra.data_inicio.day
        return _dia_no_mes(base.year, mes, dia_alvo)

    raise ValueError(f'Frequência inválida: {frequencia}')


def primeira_data(regra) -> date:
    """Primeira data da série: data_inicio alinhada à regra"""
    inicio = regra.data_inicio
    frequencia = regra.regra_frequencia

    if frequencia == 'diaria' and regra.regra_apenas_uteis:
        return _pular_fim_de_semana(inicio)

    if frequencia == 'semanal':
        dias = _dias_semana(regra)
        if dias and dia_semana(inicio) not in dias:
            seguintes = [d for d in dias if d > dia_semana(inicio)]
            if seguintes:
                return inicio + timedelta(days=seguintes[0] - dia_semana(inicio))
            return inicio + timedelta(days=7 - dia_semana(inicio) + dias[0])
        return inicio

    if frequencia == 'mensal' and regra.regra_dia_mes:
        candidata = _dia_no_mes(inicio.year, inicio.month, regra.regra_dia_mes)
        if candidata < inicio:
            base = inicio + relativedelta(months=1)
            candidata = _dia_no_mes(base.year, base.month, regra.regra_dia_mes)
        return candidata

    if frequencia == 'anual' and (regra.regra_mes or regra.regra_dia_mes):
        mes = regra.regra_mes or inicio.month
        dia_alvo = regra.regra_dia_mes or inicio.day
        candidata = _dia_no_mes(inicio.year, mes, dia_alvo)
        if candidata < inicio:
            candidata = _dia_no_mes(inicio.year + 1, mes, dia_alvo)
        return candidata

    return inicio


def calcular_datas(regra, inicio: date, fim: date) -> list:
    """
    Datas da série dentro de [inicio, fim]

    A série termina em data_fim ou após max_ocorrencias ocorrências
    (contadas desde a primeira data da regra).
    """
    if fim < inicio:
        return []

    atual = primeira_data(regra)
    indice = 0
    passos = 0

    while atual < inicio and passos < LIMITE_AVANCO:
        atual = proxima_data(regra, atual)
        indice += 1
        passos += 1

    datas = []
    while atual <= fim and len(datas) < LIMITE_DATAS:
        if regra.data_fim and atual > regra.data_fim:
            break
        if regra.max_ocorrencias and indice >= regra.max_ocorrencias:
            break
        if atual >= inicio:
            datas.append(atual)
        atual = proxima_data(regra, atual)
        indice += 1

    return datas


# ============================================================================
# RESUMO LEGÍVEL
# ============================================================================

def resumo(regra) -> str:
    intervalo = max(int(regra.regra_intervalo or 1), 1)
    frequencia = regra.regra_frequencia

    if frequencia == 'diaria':
        if intervalo == 1:
            texto = 'Todo dia útil' if regra.regra_apenas_uteis else 'Todo dia'
        else:
            texto = f'A cada {intervalo} dias'
            if regra.regra_apenas_uteis:
                texto += ' (apenas úteis)'
    elif frequencia == 'semanal':
        texto = 'Toda semana' if intervalo == 1 else f'A cada {intervalo} semanas'
        dias = _dias_semana(regra)
        if dias:
            texto += ': ' + ', '.join(NOMES_DIAS[d] for d in dias)
    elif frequencia == 'mensal':
        texto = 'Todo mês' if intervalo == 1 else f'A cada {intervalo} meses'
        if regra.regra_dia_mes == ULTIMO_DIA:
            texto += ', último dia'
        elif regra.regra_dia_mes:
            texto += f', dia {regra.regra_dia_mes}'
    else:
        texto = 'Todo ano' if intervalo == 1 else f'A cada {intervalo} anos'
        if regra.regra_mes and regra.regra_dia_mes:
            dia = 'último dia' if regra.regra_dia_mes == ULTIMO_DIA else str(regra.regra_dia_mes)
            texto += f', {dia} de {NOMES_MESES[regra.regra_mes - 1]}'

    if regra.regra_hora:
        texto += f' às {regra.regra_hora}'

    if regra.data_fim:
        texto += f' até {regra.data_fim.strftime("%d/%m/%Y")}'
    elif regra.max_ocorrencias:
        texto += f' ({regra.max_ocorrencias}x)'

    return texto


# ============================================================================
# CRUD DE REGRAS
# ============================================================================

def _validar_regra(dados: dict, entidade: str) -> dict:
    frequencia = dados.get('regra_frequencia')
    if frequencia not in FREQUENCIAS:
        raise ValueError(f'Frequência inválida. Use uma das seguintes: {", ".join(FREQUENCIAS)}')

    try:
        intervalo = int(dados.get('regra_intervalo') or 1)
    except (TypeError, ValueError):
        raise ValueError('Intervalo inválido')
    if intervalo < 1:
        raise ValueError('Intervalo deve ser maior ou igual a 1')

    dias_semana = dados.get('regra_dias_semana') or []
    try:
        dias_semana = sorted({int(d) for d in dias_semana})
    except (TypeError, ValueError):
        raise ValueError('Dias da semana inválidos')
    if any(d < 0 or d > 6 for d in dias_semana):
        raise ValueError('Dias da semana devem estar entre 0 (Domingo) e 6 (Sábado)')

    dia_mes = dados.get('regra_dia_mes')
    if dia_mes not in (None, ''):
        dia_mes = int(dia_mes)
        if not (1 <= dia_mes <= 31 or dia_mes == ULTIMO_DIA):
            raise ValueError('Dia do mês deve estar entre 1 e 31 (ou 99 para o último dia)')
    else:
        dia_mes = None

    mes = dados.get('regra_mes')
    if mes not in (None, ''):
        mes = int(mes)
        if not 1 <= mes <= 12:
            raise ValueError('Mês deve estar entre 1 e 12')
    else:
        mes = None

    hora = dados.get('regra_hora') or None
    parse_hora(hora)
    if entidade == 'audiencia' and not hora:
        raise ValueError('Horário é obrigatório para audiências recorrentes')

    data_inicio = parse_date(dados.get('data_inicio'))
    if not data_inicio:
        raise ValueError('Data de início é obrigatória')
    data_fim = parse_date(dados.get('data_fim'))
    if data_fim and data_fim < data_inicio:
        raise ValueError('Data final não pode ser anterior à data de início')

    max_ocorrencias = dados.get('max_ocorrencias')
    if max_ocorrencias not in (None, ''):
        max_ocorrencias = int(max_ocorrencias)
        if max_ocorrencias < 1:
            raise ValueError('Número máximo de ocorrências deve ser maior que zero')
    else:
        max_ocorrencias = None

    return {
        'regra_frequencia': frequencia,
        'regra_intervalo': intervalo,
        'regra_dias_semana': dias_semana,
        'regra_dia_mes': dia_mes,
        'regra_mes': mes,
        'regra_hora': hora,
        'regra_apenas_uteis': bool(dados.get('regra_apenas_uteis', False)),
        'data_inicio': data_inicio,
        'data_fim': data_fim,
        'max_ocorrencias': max_ocorrencias,
    }


def criar_recorrencia(dados: dict) -> Recorrencia:
    if not dados.get('template_nome'):
        raise ValueError('Nome é obrigatório')

    entidade = dados.get('entidade_tipo')
    if entidade not in ENTIDADES:
        raise ValueError(f'Tipo de entidade inválido. Use um dos seguintes: {", ".join(ENTIDADES)}')

    template = dict(dados.get('template_dados') or {})
    if entidade == 'audiencia' and not template.get('processo_id'):
        raise ValueError('Audiências recorrentes precisam de processo_id no template')

    regra = Recorrencia(
        template_nome=dados['template_nome'],
        template_descricao=dados.get('template_descricao'),
        entidade_tipo=entidade,
        template_dados=template,
        ativo=dados.get('ativo', True),
        total_criados=0,
        **_validar_regra(dados, entidade)
    )
    db.session.add(regra)
    db.session.flush()
    regra.proxima_execucao = next(iter(calcular_datas(regra, regra.data_inicio, regra.data_inicio + timedelta(days=400))), None)
    logger.info('Recorrência %s criada: %s', regra.id, resumo(regra))
    return regra


def obter_recorrencia(recorrencia_id: int) -> Recorrencia:
    regra = db.session.get(Recorrencia, recorrencia_id)
    if not regra:
        raise RegistroNaoEncontrado('Recorrência não encontrada')
    return regra


def listar_recorrencias(ativo=None, entidade_tipo=None) -> list:
    query = Recorrencia.query
    if ativo is not None:
        query = query.filter_by(ativo=ativo)
    if entidade_tipo:
        query = query.filter_by(entidade_tipo=entidade_tipo)
    return query.order_by(Recorrencia.template_nome).all()


def atualizar_recorrencia(recorrencia_id: int, dados: dict) -> Recorrencia:
    """Altera regra e template; afeta apenas ocorrências ainda não materializadas"""
    regra = obter_recorrencia(recorrencia_id)

    if 'template_nome' in dados:
        if not dados['template_nome']:
            raise ValueError('Nome é obrigatório')
        regra.template_nome = dados['template_nome']
    if 'template_descricao' in dados:
        regra.template_descricao = dados['template_descricao']
    if 'template_dados' in dados:
        regra.template_dados = dict(dados['template_dados'] or {})

    atual = regra.to_dict()
    mesclado = {campo: dados.get(campo, atual[campo]) for campo in (
        'regra_frequencia', 'regra_intervalo', 'regra_dias_semana', 'regra_dia_mes', 'regra_mes',
        'regra_hora', 'regra_apenas_uteis', 'data_inicio', 'data_fim', 'max_ocorrencias')}
    for campo, valor in _validar_regra(mesclado, regra.entidade_tipo).items():
        setattr(regra, campo, valor)

    db.session.add(regra)
    return regra


def desativar_recorrencia(recorrencia_id: int) -> Recorrencia:
    regra = obter_recorrencia(recorrencia_id)
    regra.ativo = False
    db.session.add(regra)
    return regra


def ativar_recorrencia(recorrencia_id: int) -> Recorrencia:
    regra = obter_recorrencia(recorrencia_id)
    regra.ativo = True
    db.session.add(regra)
    return regra


# ============================================================================
# EXPANSÃO VIRTUAL E MATERIALIZAÇÃO
# ============================================================================

def id_virtual(recorrencia_id: int, data: date) -> str:
    return f'virtual:{recorrencia_id}:{data.isoformat()}'


def parse_id_virtual(valor: str) -> tuple[int, date]:
    try:
        prefixo, recorrencia_id, data = str(valor).split(':')
        if prefixo != 'virtual':
            raise ValueError
        return int(recorrencia_id), parse_date(data)
    except ValueError:
        raise ValueError(f'Identificador de ocorrência virtual inválido: {valor}')


def datas_existentes(recorrencia_ids, inicio: date, fim: date) -> set:
    """Pares (recorrencia_id, data) que já têm ocorrência real no intervalo"""
    ids = list(recorrencia_ids)
    if not ids:
        return set()
    existentes = set()
    for modelo in MODELOS.values():
        linhas = db.session.query(modelo.recorrencia_id, modelo.recorrencia_data).filter(
            modelo.recorrencia_id.in_(ids),
            modelo.recorrencia_data >= inicio,
            modelo.recorrencia_data <= fim
        ).all()
        existentes.update((rid, d) for rid, d in linhas)
    return existentes


def instancia_virtual(regra, data: date) -> dict:
    """Item de agenda de uma ocorrência ainda não materializada"""
    template = regra.template_dados or {}
    hora = parse_hora(regra.regra_hora)
    inicio = datetime.combine(data, hora or time(0, 0))
    duracao = template.get('duracao_minutos')
    fim = inicio + timedelta(minutes=int(duracao)) if duracao and hora else None
    entidade = regra.entidade_tipo

    return {
        'id': id_virtual(regra.id, data),
        'tipo_entidade': entidade,
        'entidade_id': None,
        'titulo': regra.template_nome,
        'descricao': regra.template_descricao,
        'data_inicio': inicio.isoformat(),
        'data_fim': fim.isoformat() if fim else None,
        'dia_inteiro': hora is None and entidade != 'audiencia',
        'status': STATUS_INICIAL[entidade],
        'prioridade': template.get('prioridade', 'media') if entidade == 'tarefa' else None,
        'subtipo': template.get('tipo') or template.get('tipo_audiencia'),
        'prazo_data_limite': None,
        'horario_planejado_dia': regra.regra_hora if entidade == 'tarefa' else None,
        'processo_id': template.get('processo_id'),
        'local': template.get('local'),
        'responsavel': template.get('responsavel'),
        'cor': template.get('cor'),
        'recorrencia_id': regra.id,
        'recorrencia_data': data.isoformat(),
        'is_virtual': True
    }


def expandir(regras, inicio: date, fim: date, existentes: set | None = None) -> list:
    """
    Ocorrências virtuais das regras ativas no intervalo

    Datas que já têm ocorrência real (existentes) ou que foram excluídas
    não são geradas.
    """
    regras = [r for r in regras if r.ativo]
    if existentes is None:
        existentes = datas_existentes([r.id for r in regras], inicio, fim)

    instancias = []
    for regra in regras:
        excluidas = regra.datas_excluidas()
        for data in calcular_datas(regra, inicio, fim):
            if (regra.id, data) in existentes or data in excluidas:
                continue
            instancias.append(instancia_virtual(regra, data))
    return instancias


def _ocorrencia_existente(regra, data: date):
    modelo = MODELOS[regra.entidade_tipo]
    return modelo.query.filter_by(recorrencia_id=regra.id, recorrencia_data=data).first()


def materializar(regra, data: date):
    """
    Cria a tarefa/evento/audiência real da ocorrência `data`

    Idempotente: se a ocorrência já existe, ela é retornada.

    Raises:
        ValueError: Data fora da série ou excluída
    """
    existente = _ocorrencia_existente(regra, data)
    if existente:
        return existente

    if data in regra.datas_excluidas():
        raise ValueError('Esta ocorrência foi excluída da série')
    if data not in calcular_datas(regra, data, data):
        raise ValueError('Data não pertence à série da recorrência')

    template = regra.template_dados or {}
    campos = {c: template[c] for c in CAMPOS_TEMPLATE[regra.entidade_tipo] if template.get(c) is not None}
    hora = parse_hora(regra.regra_hora)
    duracao = int(template.get('duracao_minutos') or 60)

    if regra.entidade_tipo == 'tarefa':
        campos.setdefault('descricao', regra.template_descricao)
        ocorrencia = Tarefa(
            titulo=regra.template_nome,
            data_inicio=data,
            data_fim=data,
            horario_planejado_dia=regra.regra_hora,
            status='pendente',
            **campos
        )
    elif regra.entidade_tipo == 'evento':
        campos.setdefault('descricao', regra.template_descricao)
        inicio = datetime.combine(data, hora or time(0, 0))
        ocorrencia = Evento(
            titulo=regra.template_nome,
            data_inicio=inicio,
            data_fim=inicio + timedelta(minutes=duracao) if hora else datetime.combine(data, time(23, 59)),
            dia_inteiro=hora is None,
            status='agendado',
            **campos
        )
    else:
        campos.setdefault('observacoes', regra.template_descricao)
        ocorrencia = Audiencia(
            titulo=regra.template_nome,
            data_hora=datetime.combine(data, hora),
            duracao_minutos=duracao,
            status='agendada',
            **campos
        )

    ocorrencia.recorrencia_id = regra.id
    ocorrencia.recorrencia_data = data
    regra.total_criados = (regra.total_criados or 0) + 1
    db.session.add(ocorrencia)
    db.session.add(regra)
    db.session.flush()
    return ocorrencia


def materializar_virtual(identificador: str):
    recorrencia_id, data = parse_id_virtual(identificador)
    return materializar(obter_recorrencia(recorrencia_id), data)


def processar_janela(hoje: date | None = None, janela_dias: int | None = None) -> dict:
    """
    Materializa as ocorrências de todas as regras ativas na janela [hoje, hoje + janela]

    Erros em uma regra são registrados e não interrompem as demais.

    Returns:
        dict: success, recorrencias_processadas, ocorrencias_criadas, erros
    """
    hoje = hoje or date.today()
    if janela_dias is None:
        janela_dias = current_app.config.get('JANELA_RECORRENCIA_DIAS', 45)
    fim = hoje + timedelta(days=janela_dias)

    regras = Recorrencia.query.filter(
        Recorrencia.ativo.is_(True),
        or_(Recorrencia.data_fim.is_(None), Recorrencia.data_fim >= hoje)
    ).all()

    processadas = 0
    criadas = 0
    erros = []

    for regra in regras:
        try:
            existentes = datas_existentes([regra.id], hoje, fim)
            excluidas = regra.datas_excluidas()
            for data in calcular_datas(regra, hoje, fim):
                if (regra.id, data) in existentes or data in excluidas:
                    continue
                materializar(regra, data)
                criadas += 1

            seguintes = calcular_datas(regra, fim + timedelta(days=1), fim + timedelta(days=400))
            regra.proxima_execucao = seguintes[0] if seguintes else None
            regra.ultima_execucao = datetime.utcnow()
            db.session.add(regra)
            db.session.commit()
            processadas += 1
        except Exception as e:
            db.session.rollback()
            logger.exception('Erro ao processar recorrência %s', regra.id)
            erros.append({'recorrencia_id': regra.id, 'erro': str(e)})

    logger.info('Recorrências processadas: %s, ocorrências criadas: %s', processadas, criadas)
    return {
        'success': not erros,
        'recorrencias_processadas': processadas,
        'ocorrencias_criadas': criadas,
        'erros': erros
    }


# ============================================================================
# EXCLUSÃO DE OCORRÊNCIAS
# ============================================================================

def excluir_ocorrencia(recorrencia_id: int, data, escopo: str = 'esta', hoje: date | None = None) -> dict:
    """
    Remove uma ocorrência ('esta') ou a série inteira a partir de hoje ('todas')

    - esta: registra a data como exceção e apaga a ocorrência real, se existir
    - todas: desativa a regra e apaga as ocorrências futuras não finalizadas
    """
    regra = obter_recorrencia(recorrencia_id)
    data = parse_date(data)
    hoje = hoje or date.today()
    modelo = MODELOS[regra.entidade_tipo]

    if escopo == 'esta':
        if not data:
            raise ValueError('Data da ocorrência é obrigatória')
        if data not in regra.datas_excluidas():
            regra.exclusoes.append(RecorrenciaExclusao(data=data))
        ocorrencia = modelo.query.filter_by(recorrencia_id=regra.id, recorrencia_data=data).first()
        removidas = 0
        if ocorrencia and ocorrencia.status not in STATUS_FINALIZADOS:
            db.session.delete(ocorrencia)
            removidas = 1
        db.session.add(regra)
        return {'escopo': 'esta', 'data': data.isoformat(), 'ocorrencias_removidas': removidas}

    if escopo == 'todas':
        regra.ativo = False
        futuras = modelo.query.filter(
            modelo.recorrencia_id == regra.id,
            modelo.recorrencia_data >= hoje
        ).all()
        removidas = 0
        for ocorrencia in futuras:
            if ocorrencia.status not in STATUS_FINALIZADOS:
                db.session.delete(ocorrencia)
                removidas += 1
        db.session.add(regra)
        logger.info('Série %s encerrada; %s ocorrências futuras removidas', regra.id, removidas)
        return {'escopo': 'todas', 'ocorrencias_removidas': removidas}

    raise ValueError("Escopo inválido. Use 'esta' ou 'todas'")
