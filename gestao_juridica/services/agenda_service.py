"""
Agenda - tarefas, compromissos (eventos) e audiências

Este serviço implementa:
1. CRUD de tarefas (com checklist e prazo processual), eventos e audiências
2. Visão consolidada do calendário (itens reais + ocorrências virtuais de recorrências)
3. Ordenação dos itens de um mesmo dia
4. Mover itens de data (arrastar e soltar) com confirmação de prazo fatal
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from functools import cmp_to_key

from gestao_juridica.errors import ConfirmacaoNecessaria, RegistroNaoEncontrado
from gestao_juridica.models import db, Tarefa, TarefaChecklistItem, Evento, Audiencia, Recorrencia, Processo
from gestao_juridica.services import prazo_service, recorrencia_service
from gestao_juridica.services.periodos import parse_date
from gestao_juridica.services.recorrencia_service import parse_hora

logger = logging.getLogger(__name__)

TIPOS_TAREFA = ('prazo_processual', 'acompanhamento', 'follow_up', 'administrativo', 'outro')
PRIORIDADES = ('alta', 'media', 'baixa')
STATUS_TAREFA = ('pendente', 'em_andamento', 'concluida', 'cancelada')
STATUS_EVENTO = ('agendado', 'realizado', 'cancelado')
TIPOS_AUDIENCIA = ('inicial', 'instrucao', 'conciliacao', 'julgamento', 'una', 'outra')
MODALIDADES = ('presencial', 'virtual')
STATUS_AUDIENCIA = ('agendada', 'realizada', 'cancelada', 'adiada', 'remarcada')

ENTIDADES = ('tarefa', 'evento', 'audiencia')

# Ordem dentro do dia: audiência, tarefa, evento
ORDEM_ENTIDADE = {'audiencia': 0, 'tarefa': 1, 'evento': 2}
ORDEM_PRIORIDADE = {'alta': 0, 'media': 1, 'baixa': 2}

STATUS_ENCERRADOS = ('concluida', 'cancelada', 'realizado', 'cancelado', 'realizada')


def _escolha(valor, opcoes, rotulo):
    if valor not in opcoes:
        raise ValueError(f'{rotulo} inválido(a). Use um dos seguintes: {", ".join(opcoes)}')
    return valor


def _validar_processo(processo_id, obrigatorio=False):
    if not processo_id:
        if obrigatorio:
            raise ValueError('Processo é obrigatório')
        return None
    if not db.session.get(Processo, processo_id):
        raise RegistroNaoEncontrado('Processo não encontrado')
    return processo_id


def _parse_datetime(valor, rotulo='Data'):
    if not valor:
        return None
    if isinstance(valor, datetime):
        return valor
    try:
        return datetime.fromisoformat(str(valor))
    except ValueError:
        raise ValueError(f'{rotulo} inválida: {valor}')


# ============================================================================
# 1. TAREFAS
# ============================================================================

def obter_tarefa(tarefa_id: int) -> Tarefa:
    tarefa = db.session.get(Tarefa, tarefa_id)
    if not tarefa:
        raise RegistroNaoEncontrado('Tarefa não encontrada')
    return tarefa


def _aplicar_prazo(tarefa: Tarefa, dados: dict) -> None:
    """Calcula o prazo fatal a partir da intimação quando não informado"""
    if dados.get('prazo_tipo'):
        tarefa.prazo_tipo = _escolha(dados['prazo_tipo'], prazo_service.TIPOS_PRAZO, 'Tipo de prazo')
    if 'prazo_dias_uteis' in dados:
        tarefa.prazo_dias_uteis = bool(dados['prazo_dias_uteis'])

    intimacao = parse_date(dados.get('prazo_data_intimacao'))
    quantidade = dados.get('prazo_quantidade_dias')
    limite = parse_date(dados.get('prazo_data_limite'))

    if intimacao:
        tarefa.prazo_data_intimacao = intimacao
    if quantidade:
        tarefa.prazo_quantidade_dias = int(quantidade)

    if limite:
        tarefa.prazo_data_limite = limite
    elif intimacao and quantidade:
        calculo = prazo_service.calcular_prazo(intimacao, quantidade,
                                               tarefa.prazo_dias_uteis is not False, dados.get('uf'))
        tarefa.prazo_data_limite = calculo['data_limite']


def criar_tarefa(dados: dict) -> Tarefa:
    """
    Cria uma tarefa

    Args:
        dados (dict): titulo, data_inicio, tipo, prioridade, processo_id, prazo_* ...

    Returns:
        Tarefa: Objeto criado (sem commit)

    Raises:
        ValueError: Se dados inválidos
    """
    if not dados.get('titulo'):
        raise ValueError('Título é obrigatório')

    tarefa = Tarefa(
        titulo=dados['titulo'],
        descricao=dados.get('descricao'),
        tipo=_escolha(dados.get('tipo', 'outro'), TIPOS_TAREFA, 'Tipo'),
        prioridade=_escolha(dados.get('prioridade', 'media'), PRIORIDADES, 'Prioridade'),
        status=_escolha(dados.get('status', 'pendente'), STATUS_TAREFA, 'Status'),
        horario_planejado_dia=dados.get('horario_planejado_dia') or None,
        duracao_planejada_minutos=dados.get('duracao_planejada_minutos'),
        responsavel=dados.get('responsavel'),
        processo_id=_validar_processo(dados.get('processo_id')),
        cor=dados.get('cor'),
        prazo_dias_uteis=dados.get('prazo_dias_uteis', True),
        prazo_cumprido=False,
        progresso_percentual=0
    )
    parse_hora(tarefa.horario_planejado_dia)
    _aplicar_prazo(tarefa, dados)

    tarefa.data_inicio = parse_date(dados.get('data_inicio')) or tarefa.prazo_data_limite
    if not tarefa.data_inicio:
        raise ValueError('Data de início é obrigatória')
    tarefa.data_fim = parse_date(dados.get('data_fim'))
    if tarefa.data_fim and tarefa.data_fim < tarefa.data_inicio:
        raise ValueError('Data final não pode ser anterior à data de início')
    if tarefa.prazo_data_limite and tarefa.data_inicio > tarefa.prazo_data_limite:
        raise ValueError('Data de execução não pode ser posterior ao prazo fatal')

    for ordem, item in enumerate(dados.get('checklist') or []):
        texto = item.get('item') if isinstance(item, dict) else item
        if texto:
            tarefa.checklist.append(TarefaChecklistItem(item=texto, ordem=ordem))

    db.session.add(tarefa)
    db.session.flush()
    return tarefa


def atualizar_tarefa(tarefa_id: int, dados: dict) -> Tarefa:
    """
    Atualiza uma tarefa. Alterar o prazo fatal exige dados['confirmar_prazo'] = True.
    """
    tarefa = obter_tarefa(tarefa_id)

    if 'prazo_data_limite' in dados:
        novo_prazo = parse_date(dados['prazo_data_limite'])
        if novo_prazo != tarefa.prazo_data_limite:
            alterar_prazo_fatal(tarefa, novo_prazo, dados.get('confirmar_prazo', False))

    if 'titulo' in dados:
        if not dados['titulo']:
            raise ValueError('Título é obrigatório')
        tarefa.titulo = dados['titulo']
    if 'tipo' in dados:
        tarefa.tipo = _escolha(dados['tipo'], TIPOS_TAREFA, 'Tipo')
    if 'prioridade' in dados:
        tarefa.prioridade = _escolha(dados['prioridade'], PRIORIDADES, 'Prioridade')
    if 'status' in dados:
        tarefa.status = _escolha(dados['status'], STATUS_TAREFA, 'Status')
    if 'horario_planejado_dia' in dados:
        parse_hora(dados['horario_planejado_dia'])
        tarefa.horario_planejado_dia = dados['horario_planejado_dia'] or None
    if 'progresso_percentual' in dados:
        progresso = int(dados['progresso_percentual'] or 0)
        if not 0 <= progresso <= 100:
            raise ValueError('Progresso deve estar entre 0 e 100')
        tarefa.progresso_percentual = progresso
    if 'processo_id' in dados:
        tarefa.processo_id = _validar_processo(dados['processo_id'])
    if 'data_fim' in dados:
        tarefa.data_fim = parse_date(dados['data_fim'])

    for campo in ('descricao', 'responsavel', 'cor', 'duracao_planejada_minutos', 'prazo_tipo'):
        if campo in dados:
            setattr(tarefa, campo, dados[campo])

    db.session.add(tarefa)
    return tarefa


def concluir_tarefa(tarefa_id: int) -> Tarefa:
    tarefa = obter_tarefa(tarefa_id)
    if tarefa.status == 'cancelada':
        raise ValueError('Tarefa cancelada não pode ser concluída')

    tarefa.status = 'concluida'
    tarefa.data_conclusao = datetime.utcnow()
    tarefa.progresso_percentual = 100
    if tarefa.prazo_data_limite:
        tarefa.prazo_cumprido = True
    db.session.add(tarefa)
    return tarefa


def excluir_tarefa(tarefa_id: int) -> None:
    db.session.delete(obter_tarefa(tarefa_id))


def adicionar_item_checklist(tarefa_id: int, texto: str) -> TarefaChecklistItem:
    tarefa = obter_tarefa(tarefa_id)
    if not texto:
        raise ValueError('Item é obrigatório')
    ordem = max((item.ordem or 0 for item in tarefa.checklist), default=-1) + 1
    item = TarefaChecklistItem(item=texto, ordem=ordem)
    tarefa.checklist.append(item)
    db.session.add(tarefa)
    return item


def alternar_item_checklist(tarefa_id: int, item_id: int) -> TarefaChecklistItem:
    item = TarefaChecklistItem.query.filter_by(id=item_id, tarefa_id=tarefa_id).first()
    if not item:
        raise RegistroNaoEncontrado('Item do checklist não encontrado')
    item.concluido = not item.concluido
    item.concluido_em = datetime.utcnow() if item.concluido else None
    db.session.add(item)
    return item


def remover_item_checklist(tarefa_id: int, item_id: int) -> None:
    item = TarefaChecklistItem.query.filter_by(id=item_id, tarefa_id=tarefa_id).first()
    if not item:
        raise RegistroNaoEncontrado('Item do checklist não encontrado')
    db.session.delete(item)


# ============================================================================
# 2. EVENTOS (COMPROMISSOS)
# ============================================================================

def obter_evento(evento_id: int) -> Evento:
    evento = db.session.get(Evento, evento_id)
    if not evento:
        raise RegistroNaoEncontrado('Evento não encontrado')
    return evento


def criar_evento(dados: dict) -> Evento:
    if not dados.get('titulo'):
        raise ValueError('Título é obrigatório')
    inicio = _parse_datetime(dados.get('data_inicio'), 'Data de início')
    if not inicio:
        raise ValueError('Data de início é obrigatória')
    fim = _parse_datetime(dados.get('data_fim'), 'Data final')
    if fim and fim < inicio:
        raise ValueError('Data final não pode ser anterior à data de início')

    evento = Evento(
        titulo=dados['titulo'],
        descricao=dados.get('descricao'),
        data_inicio=inicio,
        data_fim=fim,
        dia_inteiro=bool(dados.get('dia_inteiro', False)),
        local=dados.get('local'),
        status=_escolha(dados.get('status', 'agendado'), STATUS_EVENTO, 'Status'),
        responsavel=dados.get('responsavel'),
        processo_id=_validar_processo(dados.get('processo_id')),
        cor=dados.get('cor')
    )
    db.session.add(evento)
    db.session.flush()
    return evento


def atualizar_evento(evento_id: int, dados: dict) -> Evento:
    evento = obter_evento(evento_id)
    if 'titulo' in dados:
        if not dados['titulo']:
            raise ValueError('Título é obrigatório')
        evento.titulo = dados['titulo']
    if 'data_inicio' in dados:
        evento.data_inicio = _parse_datetime(dados['data_inicio'], 'Data de início')
    if 'data_fim' in dados:
        evento.data_fim = _parse_datetime(dados['data_fim'], 'Data final')
    if 'status' in dados:
        evento.status = _escolha(dados['status'], STATUS_EVENTO, 'Status')
    if 'processo_id' in dados:
        evento.processo_id = _validar_processo(dados['processo_id'])
    for campo in ('descricao', 'dia_inteiro', 'local', 'responsavel', 'cor'):
        if campo in dados:
            setattr(evento, campo, dados[campo])
    if evento.data_fim and evento.data_fim < evento.data_inicio:
        raise ValueError('Data final não pode ser anterior à data de início')
    db.session.add(evento)
    return evento


def excluir_evento(evento_id: int) -> None:
    db.session.delete(obter_evento(evento_id))


# ============================================================================
# 3. AUDIÊNCIAS
# ============================================================================

def obter_audiencia(audiencia_id: int) -> Audiencia:
    audiencia = db.session.get(Audiencia, audiencia_id)
    if not audiencia:
        raise RegistroNaoEncontrado('Audiência não encontrada')
    return audiencia


CAMPOS_AUDIENCIA = ('titulo', 'tribunal', 'comarca', 'vara', 'forum', 'sala', 'link_virtual',
                    'juiz', 'responsavel', 'observacoes', 'resultado_tipo', 'resultado_descricao')


def criar_audiencia(dados: dict) -> Audiencia:
    data_hora = _parse_datetime(dados.get('data_hora'), 'Data/hora')
    if not data_hora:
        raise ValueError('Data/hora é obrigatória')

    modalidade = _escolha(dados.get('modalidade', 'presencial'), MODALIDADES, 'Modalidade')
    if modalidade == 'virtual' and not dados.get('link_virtual'):
        logger.warning('Audiência virtual cadastrada sem link')

    audiencia = Audiencia(
        processo_id=_validar_processo(dados.get('processo_id'), obrigatorio=True),
        tipo_audiencia=_escolha(dados.get('tipo_audiencia', 'outra'), TIPOS_AUDIENCIA, 'Tipo de audiência'),
        modalidade=modalidade,
        data_hora=data_hora,
        duracao_minutos=int(dados.get('duracao_minutos') or 60),
        status=_escolha(dados.get('status', 'agendada'), STATUS_AUDIENCIA, 'Status'),
        **{campo: dados.get(campo) for campo in CAMPOS_AUDIENCIA}
    )
    db.session.add(audiencia)
    db.session.flush()
    return audiencia


def atualizar_audiencia(audiencia_id: int, dados: dict) -> Audiencia:
    audiencia = obter_audiencia(audiencia_id)
    if 'data_hora' in dados:
        audiencia.data_hora = _parse_datetime(dados['data_hora'], 'Data/hora')
    if 'tipo_audiencia' in dados:
        audiencia.tipo_audiencia = _escolha(dados['tipo_audiencia'], TIPOS_AUDIENCIA, 'Tipo de audiência')
    if 'modalidade' in dados:
        audiencia.modalidade = _escolha(dados['modalidade'], MODALIDADES, 'Modalidade')
    if 'status' in dados:
        audiencia.status = _escolha(dados['status'], STATUS_AUDIENCIA, 'Status')
    if 'duracao_minutos' in dados:
        audiencia.duracao_minutos = int(dados['duracao_minutos'] or 60)
    for campo in CAMPOS_AUDIENCIA:
        if campo in dados:
            setattr(audiencia, campo, dados[campo])
    db.session.add(audiencia)
    return audiencia


def registrar_resultado_audiencia(audiencia_id: int, resultado_tipo: str, descricao: str | None = None) -> Audiencia:
    audiencia = obter_audiencia(audiencia_id)
    if audiencia.status == 'cancelada':
        raise ValueError('Audiência cancelada não pode ter resultado')
    if not resultado_tipo:
        raise ValueError('Tipo de resultado é obrigatório')
    audiencia.status = 'realizada'
    audiencia.resultado_tipo = resultado_tipo
    audiencia.resultado_descricao = descricao
    db.session.add(audiencia)
    return audiencia


def excluir_audiencia(audiencia_id: int) -> None:
    db.session.delete(obter_audiencia(audiencia_id))


# ============================================================================
# 4. VISÃO CONSOLIDADA DO CALENDÁRIO
# ============================================================================

def item_tarefa(tarefa: Tarefa) -> dict:
    hora = parse_hora(tarefa.horario_planejado_dia)
    inicio = datetime.combine(tarefa.data_inicio, hora or time(0, 0))
    return {
        'id': f'tarefa:{tarefa.id}',
        'tipo_entidade': 'tarefa',
        'entidade_id': tarefa.id,
        'titulo': tarefa.titulo,
        'descricao': tarefa.descricao,
        'data_inicio': inicio.isoformat(),
        'data_fim': tarefa.data_fim.isoformat() if tarefa.data_fim else None,
        'dia_inteiro': hora is None,
        'status': tarefa.status,
        'prioridade': tarefa.prioridade,
        'subtipo': tarefa.tipo,
        'prazo_data_limite': tarefa.prazo_data_limite.isoformat() if tarefa.prazo_data_limite else None,
        'prazo_cumprido': bool(tarefa.prazo_cumprido),
        'horario_planejado_dia': tarefa.horario_planejado_dia,
        'processo_id': tarefa.processo_id,
        'local': None,
        'responsavel': tarefa.responsavel,
        'cor': tarefa.cor,
        'recorrencia_id': tarefa.recorrencia_id,
        'recorrencia_data': tarefa.recorrencia_data.isoformat() if tarefa.recorrencia_data else None,
        'is_virtual': False
    }


def item_evento(evento: Evento) -> dict:
    return {
        'id': f'evento:{evento.id}',
        'tipo_entidade': 'evento',
        'entidade_id': evento.id,
        'titulo': evento.titulo,
        'descricao': evento.descricao,
        'data_inicio': evento.data_inicio.isoformat(),
        'data_fim': evento.data_fim.isoformat() if evento.data_fim else None,
        'dia_inteiro': bool(evento.dia_inteiro),
        'status': evento.status,
        'prioridade': None,
        'subtipo': None,
        'prazo_data_limite': None,
        'horario_planejado_dia': None,
        'processo_id': evento.processo_id,
        'local': evento.local,
        'responsavel': evento.responsavel,
        'cor': evento.cor,
        'recorrencia_id': evento.recorrencia_id,
        'recorrencia_data': evento.recorrencia_data.isoformat() if evento.recorrencia_data else None,
        'is_virtual': False
    }


def item_audiencia(audiencia: Audiencia) -> dict:
    fim = audiencia.data_hora + timedelta(minutes=audiencia.duracao_minutos or 60)
    local = audiencia.link_virtual if audiencia.modalidade == 'virtual' else (
        ' - '.join(p for p in (audiencia.forum, audiencia.vara, audiencia.sala) if p) or None)
    return {
        'id': f'audiencia:{audiencia.id}',
        'tipo_entidade': 'audiencia',
        'entidade_id': audiencia.id,
        'titulo': audiencia.titulo or f'Audiência de {audiencia.tipo_audiencia}',
        'descricao': audiencia.observacoes,
        'data_inicio': audiencia.data_hora.isoformat(),
        'data_fim': fim.isoformat(),
        'dia_inteiro': False,
        'status': audiencia.status,
        'prioridade': None,
        'subtipo': audiencia.tipo_audiencia,
        'prazo_data_limite': None,
        'horario_planejado_dia': None,
        'processo_id': audiencia.processo_id,
        'local': local,
        'responsavel': audiencia.responsavel,
        'cor': None,
        'recorrencia_id': audiencia.recorrencia_id,
        'recorrencia_data': audiencia.recorrencia_data.isoformat() if audiencia.recorrencia_data else None,
        'is_virtual': False
    }


def _passa_filtros(item: dict, filtros: dict) -> bool:
    for campo in ('status', 'prioridade', 'responsavel'):
        if filtros.get(campo) and item.get(campo) != filtros[campo]:
            return False
    if filtros.get('processo_id') and item.get('processo_id') != int(filtros['processo_id']):
        return False
    return True


def listar_itens(inicio, fim, filtros: dict | None = None, incluir_virtuais: bool = True) -> list:
    """
    Itens de agenda no intervalo [inicio, fim] (datas inclusivas)

    Args:
        filtros: tipo_entidade (str ou lista), status, prioridade, responsavel, processo_id
        incluir_virtuais: Inclui ocorrências de recorrências ainda não materializadas
    """
    inicio = parse_date(inicio)
    fim = parse_date(fim)
    if not inicio or not fim:
        raise ValueError('Período (inicio e fim) é obrigatório')
    if fim < inicio:
        raise ValueError('Data final não pode ser anterior à data inicial')

    filtros = filtros or {}
    tipos = filtros.get('tipo_entidade') or ENTIDADES
    if isinstance(tipos, str):
        tipos = [t.strip() for t in tipos.split(',') if t.strip()]
    for tipo in tipos:
        _escolha(tipo, ENTIDADES, 'Tipo de item')

    inicio_dt = datetime.combine(inicio, time.min)
    fim_dt = datetime.combine(fim, time.max)
    itens = []

    if 'tarefa' in tipos:
        tarefas = Tarefa.query.filter(Tarefa.data_inicio >= inicio, Tarefa.data_inicio <= fim).all()
        itens.extend(item_tarefa(t) for t in tarefas)
    if 'evento' in tipos:
        eventos = Evento.query.filter(Evento.data_inicio >= inicio_dt, Evento.data_inicio <= fim_dt).all()
        itens.extend(item_evento(e) for e in eventos)
    if 'audiencia' in tipos:
        audiencias = Audiencia.query.filter(Audiencia.data_hora >= inicio_dt, Audiencia.data_hora <= fim_dt).all()
        itens.extend(item_audiencia(a) for a in audiencias)

    if incluir_virtuais:
        regras = Recorrencia.query.filter(Recorrencia.ativo.is_(True),
                                          Recorrencia.entidade_tipo.in_(tipos)).all()
        itens.extend(recorrencia_service.expandir(regras, inicio, fim))

    return [item for item in itens if _passa_filtros(item, filtros)]


def _chave_ordenacao(item: dict, hoje: date) -> tuple:
    """Chave das regras 1 a 3; horário e início ficam para _comparar_itens"""
    tipo = item['tipo_entidade']
    urgencia = 99
    if tipo == 'tarefa' and item.get('prazo_data_limite'):
        prazo = parse_date(item['prazo_data_limite'])
        if prazo < hoje:
            urgencia = 0
        elif prazo == hoje:
            urgencia = 1

    prioridade = ORDEM_PRIORIDADE.get(item.get('prioridade'), 1) if tipo == 'tarefa' else 0
    return (urgencia, ORDEM_ENTIDADE.get(tipo, 9), prioridade)


def _comparar(a, b) -> int:
    return (a > b) - (a < b)


def _comparar_itens(a: dict, b: dict, hoje: date) -> int:
    resultado = _comparar(_chave_ordenacao(a, hoje), _chave_ordenacao(b, hoje))
    if resultado:
        return resultado

    # horário planejado só desempata quando as duas tarefas têm um
    horario_a, horario_b = a.get('horario_planejado_dia'), b.get('horario_planejado_dia')
    if a['tipo_entidade'] == b['tipo_entidade'] == 'tarefa' and horario_a and horario_b:
        resultado = _comparar(horario_a, horario_b)
        if resultado:
            return resultado

    return _comparar(a.get('data_inicio') or '', b.get('data_inicio') or '')


def ordenar_itens_do_dia(itens: list, hoje: date | None = None) -> list:
    """
    Ordena os itens de um mesmo dia

    1. Urgência do prazo fatal (tarefas): vencido, vence hoje, demais
    2. Tipo: audiência, tarefa, evento
    3. Prioridade da tarefa: alta, média, baixa
    4. Horário planejado, quando as duas tarefas têm um
    5. Data/hora de início
    """
    hoje = hoje or date.today()
    return sorted(itens, key=cmp_to_key(lambda a, b: _comparar_itens(a, b, hoje)))


def agrupar_por_dia(itens: list, hoje: date | None = None, passado: bool = False) -> list:
    """Agrupa por dia (AAAA-MM-DD); dias em ordem crescente, ou decrescente para o passado"""
    grupos = {}
    for item in itens:
        grupos.setdefault(item['data_inicio'][:10], []).append(item)

    return [
        {'data': dia, 'itens': ordenar_itens_do_dia(grupos[dia], hoje), 'total': len(grupos[dia])}
        for dia in sorted(grupos, reverse=passado)
    ]


def proximos_itens_processo(processo_id: int, hoje: date | None = None, dias: int = 30) -> list:
    hoje = hoje or date.today()
    itens = listar_itens(hoje, hoje + timedelta(days=dias), {'processo_id': processo_id})
    return [item for dia in agrupar_por_dia(itens, hoje) for item in dia['itens']]


# ============================================================================
# 5. MOVER ITENS E PRAZO FATAL
# ============================================================================

def resolver_item(identificador: str):
    """
    Converte 'tarefa:5', 'evento:2', 'audiencia:7' ou 'virtual:<regra>:<data>'
    na entidade correspondente. Ocorrências virtuais são materializadas.

    Returns:
        tuple: (tipo_entidade, entidade)
    """
    if str(identificador).startswith('virtual:'):
        entidade = recorrencia_service.materializar_virtual(identificador)
        regra = recorrencia_service.obter_recorrencia(entidade.recorrencia_id)
        return regra.entidade_tipo, entidade

    try:
        tipo, entidade_id = str(identificador).split(':')
        entidade_id = int(entidade_id)
    except ValueError:
        raise ValueError(f'Identificador de item inválido: {identificador}')

    if tipo == 'tarefa':
        return tipo, obter_tarefa(entidade_id)
    if tipo == 'evento':
        return tipo, obter_evento(entidade_id)
    if tipo == 'audiencia':
        return tipo, obter_audiencia(entidade_id)
    raise ValueError(f'Tipo de item inválido: {tipo}')


def _confirmacao_prazo(tarefa: Tarefa, nova_data: date) -> ConfirmacaoNecessaria:
    distancia = max((tarefa.prazo_data_limite - tarefa.data_inicio).days, 0)
    return ConfirmacaoNecessaria(
        'A nova data ultrapassa o prazo fatal da tarefa. Informe o novo prazo fatal para confirmar.',
        {
            'tarefa_id': tarefa.id,
            'data_inicio_atual': tarefa.data_inicio.isoformat(),
            'nova_data': nova_data.isoformat(),
            'prazo_fatal_atual': tarefa.prazo_data_limite.isoformat(),
            'distancia_original_dias': distancia,
            'novo_prazo_fatal_sugerido': (nova_data + timedelta(days=distancia)).isoformat()
        }
    )


def _mover_tarefa(tarefa: Tarefa, nova_data: date, novo_horario=None, novo_prazo_fatal=None) -> Tarefa:
    novo_prazo = parse_date(novo_prazo_fatal)

    if tarefa.prazo_data_limite and nova_data > tarefa.prazo_data_limite and not novo_prazo:
        raise _confirmacao_prazo(tarefa, nova_data)

    if novo_prazo:
        if novo_prazo < nova_data:
            raise ValueError('O novo prazo fatal não pode ser anterior à nova data da tarefa')
        logger.info('Tarefa %s: prazo fatal alterado de %s para %s ao mover',
                    tarefa.id, tarefa.prazo_data_limite, novo_prazo)
        tarefa.prazo_data_limite = novo_prazo

    if tarefa.data_fim:
        tarefa.data_fim = nova_data + (tarefa.data_fim - tarefa.data_inicio)
    tarefa.data_inicio = nova_data
    if novo_horario:
        parse_hora(novo_horario)
        tarefa.horario_planejado_dia = novo_horario
    return tarefa


def mover_item(identificador: str, nova_data, novo_horario: str | None = None, novo_prazo_fatal=None):
    """
    Move um item da agenda para outra data (arrastar e soltar)

    - Eventos e audiências mantêm o horário, salvo se novo_horario (HH:MM) for informado
    - Tarefas com prazo fatal: mover para depois do prazo exige novo_prazo_fatal
      (>= nova data); sem ele, levanta ConfirmacaoNecessaria com o prazo sugerido

    Returns:
        tuple: (tipo_entidade, entidade)

    Raises:
        ConfirmacaoNecessaria: Nova data ultrapassa o prazo fatal
        ValueError: Dados inválidos ou item encerrado
    """
    nova_data = parse_date(nova_data)
    if not nova_data:
        raise ValueError('Nova data é obrigatória')
    hora = parse_hora(novo_horario)

    tipo, entidade = resolver_item(identificador)
    if entidade.status in STATUS_ENCERRADOS:
        raise ValueError('Itens concluídos, realizados ou cancelados não podem ser movidos')

    if tipo == 'tarefa':
        _mover_tarefa(entidade, nova_data, novo_horario, novo_prazo_fatal)
    elif tipo == 'evento':
        duracao = entidade.data_fim - entidade.data_inicio if entidade.data_fim else None
        entidade.data_inicio = datetime.combine(nova_data, hora or entidade.data_inicio.time())
        if duracao is not None:
            entidade.data_fim = entidade.data_inicio + duracao
    else:
        entidade.data_hora = datetime.combine(nova_data, hora or entidade.data_hora.time())

    db.session.add(entidade)
    return tipo, entidade


def alterar_prazo_fatal(tarefa, novo_prazo, confirmar: bool = False) -> Tarefa:
    """
    Altera diretamente o prazo fatal de uma tarefa; exige confirmação explícita

    Args:
        tarefa: Tarefa ou id
        novo_prazo: Nova data limite (None remove o prazo)
        confirmar: True após o usuário confirmar a alteração
    """
    if not isinstance(tarefa, Tarefa):
        tarefa = obter_tarefa(tarefa)
    novo_prazo = parse_date(novo_prazo)

    if not confirmar:
        raise ConfirmacaoNecessaria(
            'Alterar o prazo fatal exige confirmação',
            {
                'tarefa_id': tarefa.id,
                'prazo_fatal_atual': tarefa.prazo_data_limite.isoformat() if tarefa.prazo_data_limite else None,
                'novo_prazo_fatal': novo_prazo.isoformat() if novo_prazo else None
            }
        )

    if novo_prazo and novo_prazo < tarefa.data_inicio:
        raise ValueError('O prazo fatal não pode ser anterior à data de execução da tarefa')

    logger.info('Tarefa %s: prazo fatal alterado de %s para %s', tarefa.id, tarefa.prazo_data_limite, novo_prazo)
    tarefa.prazo_data_limite = novo_prazo
    db.session.add(tarefa)
    return tarefa
