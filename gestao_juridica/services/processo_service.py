"""
Serviço de Processos - Lógica de negócio para o acompanhamento de processos

Este serviço implementa:
1. CRUD de processos (numeração de pasta automática e validação do número CNJ)
2. Listagens por visão (todos, ativos, críticos, arquivados) com busca e paginação
3. Edição em lote
4. Encerramento do processo (com cancelamento de tarefas e audiências pendentes)
"""
import logging
from datetime import date, datetime, timedelta

from sqlalchemy import or_, select

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, Processo, Cliente, ContratoHonorario, Tarefa, Audiencia
from gestao_juridica.services.listagem import aplicar_ordenacao, paginar
from gestao_juridica.services.periodos import parse_date
from gestao_juridica.services.validadores import formatar_numero_cnj, validar_numero_cnj

logger = logging.getLogger(__name__)

AREAS = {
    'civel': 'Cível', 'trabalhista': 'Trabalhista', 'tributaria': 'Tributária', 'familia': 'Família',
    'criminal': 'Criminal', 'previdenciaria': 'Previdenciária', 'consumidor': 'Consumidor',
    'empresarial': 'Empresarial', 'ambiental': 'Ambiental', 'outra': 'Outra'
}
FASES = {
    'conhecimento': 'Conhecimento', 'recurso': 'Recurso', 'execucao': 'Execução',
    'cumprimento_sentenca': 'Cumprimento de Sentença'
}
INSTANCIAS = {
    '1a': '1ª Instância', '2a': '2ª Instância', '3a': '3ª Instância', 'stj': 'STJ', 'stf': 'STF',
    'tst': 'TST', 'administrativa': 'Administrativa'
}
STATUS = {
    'ativo': 'Ativo', 'suspenso': 'Suspenso', 'arquivado': 'Arquivado', 'baixado': 'Baixado',
    'transito_julgado': 'Trânsito em Julgado', 'acordo': 'Acordo'
}
RITOS = ('ordinario', 'sumario', 'especial', 'sumarissimo')
POLOS = ('ativo', 'passivo', 'terceiro')
TIPOS = ('judicial', 'administrativo', 'arbitragem')
PROVISOES = ('remota', 'possivel', 'provavel')
RESULTADOS = ('favoravel', 'desfavoravel', 'parcial', 'sem_merito')

STATUS_ENCERRADOS = ('arquivado', 'baixado', 'transito_julgado', 'acordo')
VISOES = ('todos', 'ativos', 'criticos', 'arquivados')
DIAS_PRAZO_CRITICO = 7

CAMPOS_ORDENACAO = ('numero_pasta', 'criado_em', 'data_distribuicao', 'valor_causa', 'status', 'area')
CAMPOS_LOTE = {'status': STATUS, 'fase': FASES, 'area': AREAS, 'responsavel': None}

CAMPOS_TEXTO = ('parte_contraria', 'objeto', 'responsavel', 'tribunal', 'comarca', 'vara')


def _escolha(valor, opcoes, rotulo):
    if valor in (None, ''):
        return None
    if valor not in opcoes:
        raise ValueError(f'{rotulo} inválido(a). Use um dos seguintes: {", ".join(opcoes)}')
    return valor


class ProcessoService:
    """
    Serviço para gerenciamento de processos
    """

    # ========================================================================
    # CONSULTAS
    # ========================================================================

    @staticmethod
    def _subquery_criticos(hoje):
        """Processos com tarefa em aberto cujo prazo fatal vence em 0..7 dias"""
        return select(Tarefa.processo_id).where(
            Tarefa.processo_id.isnot(None),
            Tarefa.status.in_(('pendente', 'em_andamento')),
            or_(Tarefa.prazo_cumprido.is_(False), Tarefa.prazo_cumprido.is_(None)),
            Tarefa.prazo_data_limite >= hoje,
            Tarefa.prazo_data_limite <= hoje + timedelta(days=DIAS_PRAZO_CRITICO)
        )

    @staticmethod
    def _filtrar_visao(query, visao, hoje):
        if visao == 'ativos':
            return query.filter(Processo.status.notin_(STATUS_ENCERRADOS))
        if visao == 'arquivados':
            return query.filter(Processo.status.in_(STATUS_ENCERRADOS))
        if visao == 'criticos':
            return query.filter(Processo.status.notin_(STATUS_ENCERRADOS),
                                Processo.id.in_(ProcessoService._subquery_criticos(hoje)))
        return query

    @staticmethod
    def serializar(processo, criticos=()):
        dados = processo.to_dict()
        dados['area_label'] = AREAS.get(processo.area, processo.area)
        dados['fase_label'] = FASES.get(processo.fase, processo.fase)
        dados['instancia_label'] = INSTANCIAS.get(processo.instancia, processo.instancia)
        dados['status_label'] = STATUS.get(processo.status, processo.status)
        dados['encerrado'] = processo.status in STATUS_ENCERRADOS
        dados['tem_prazo_critico'] = processo.id in criticos
        return dados

    @staticmethod
    def listar(visao='todos', busca=None, filtros=None, ordenar_por=None, direcao='desc',
               pagina=1, por_pagina=50, hoje=None):
        """
        Lista processos de uma visão com busca, filtros, ordenação e paginação

        Args:
            visao (str): todos, ativos, criticos, arquivados
            busca (str): Texto procurado em pasta, CNJ, parte contrária e nome do cliente
            filtros (dict): area, fase, status, cliente_id, responsavel

        Returns:
            dict: itens serializados + dados de paginação
        """
        hoje = hoje or date.today()
        if visao not in VISOES:
            raise ValueError(f'Visão inválida. Use uma das seguintes: {", ".join(VISOES)}')

        query = ProcessoService._filtrar_visao(Processo.query, visao, hoje)

        for campo, valor in (filtros or {}).items():
            if valor not in (None, '') and campo in ('area', 'fase', 'status', 'cliente_id', 'responsavel'):
                query = query.filter(getattr(Processo, campo) == valor)

        if busca:
            termo = f'%{busca}%'
            query = query.outerjoin(Cliente, Processo.cliente_id == Cliente.id).filter(or_(
                Processo.numero_pasta.ilike(termo),
                Processo.numero_cnj.ilike(termo),
                Processo.parte_contraria.ilike(termo),
                Cliente.nome_completo.ilike(termo)
            ))

        query = aplicar_ordenacao(query, Processo, ordenar_por, direcao, CAMPOS_ORDENACAO,
                                  padrao=Processo.criado_em.desc())
        resultado = paginar(query, pagina, por_pagina)

        ids = [p.id for p in resultado['itens']]
        criticos = set()
        if ids:
            criticos = set(db.session.scalars(
                ProcessoService._subquery_criticos(hoje).where(Tarefa.processo_id.in_(ids))
            ).all())
        resultado['itens'] = [ProcessoService.serializar(p, criticos) for p in resultado['itens']]
        return resultado

    @staticmethod
    def contadores(hoje=None):
        """Quantidade de processos em cada visão"""
        hoje = hoje or date.today()
        return {
            visao: ProcessoService._filtrar_visao(Processo.query, visao, hoje).count()
            for visao in VISOES
        }

    @staticmethod
    def obter(processo_id):
        processo = db.session.get(Processo, processo_id)
        if not processo:
            raise RegistroNaoEncontrado('Processo não encontrado')
        return processo

    # ========================================================================
    # CRIAÇÃO E EDIÇÃO
    # ========================================================================

    @staticmethod
    def proximo_numero_pasta():
        numeros = [int(n) for (n,) in db.session.query(Processo.numero_pasta).all() if n and n.isdigit()]
        return str(max(numeros, default=0) + 1).zfill(4)

    @staticmethod
    def _validar_cnj(numero, processo_id=None):
        if not numero:
            return None
        numero = formatar_numero_cnj(numero.strip())
        valido, erro = validar_numero_cnj(numero)
        if not valido:
            raise ValueError(f'Número CNJ inválido: {erro}')

        existe = Processo.query.filter(Processo.numero_cnj == numero)
        if processo_id:
            existe = existe.filter(Processo.id != processo_id)
        if existe.first():
            raise ValueError('Já existe um processo com este número CNJ')
        return numero

    @staticmethod
    def _validar_contrato(contrato_id, cliente_id):
        if not contrato_id:
            return None
        contrato = db.session.get(ContratoHonorario, contrato_id)
        if not contrato:
            raise RegistroNaoEncontrado('Contrato não encontrado')
        if contrato.cliente_id != int(cliente_id):
            raise ValueError('Contrato pertence a outro cliente')
        return contrato.id

    @staticmethod
    def _aplicar_classificacao(processo, dados):
        validacoes = (
            ('area', AREAS, 'Área'), ('fase', FASES, 'Fase'), ('instancia', INSTANCIAS, 'Instância'),
            ('rito', RITOS, 'Rito'), ('polo_cliente', POLOS, 'Polo'), ('tipo', TIPOS, 'Tipo'),
            ('status', STATUS, 'Status'), ('provisao_perda', PROVISOES, 'Provisão'),
        )
        for campo, opcoes, rotulo in validacoes:
            if campo in dados:
                valor = _escolha(dados[campo], opcoes, rotulo)
                if valor is None and campo == 'status':
                    raise ValueError('Status é obrigatório')
                setattr(processo, campo, valor)

        for campo in CAMPOS_TEXTO:
            if campo in dados:
                setattr(processo, campo, dados[campo])

        if 'valor_causa' in dados:
            processo.valor_causa = dados['valor_causa']
        if 'data_distribuicao' in dados:
            processo.data_distribuicao = parse_date(dados['data_distribuicao'])

    @staticmethod
    def criar(dados):
        """
        Cria um novo processo

        Args:
            dados (dict): cliente_id (obrigatório), numero_cnj, area, fase, ...

        Returns:
            Processo: Objeto criado

        Raises:
            ValueError: Se dados inválidos
        """
        cliente_id = dados.get('cliente_id')
        if not cliente_id:
            raise ValueError('Cliente é obrigatório')
        if not db.session.get(Cliente, cliente_id):
            raise RegistroNaoEncontrado('Cliente não encontrado')

        numero_pasta = dados.get('numero_pasta') or ProcessoService.proximo_numero_pasta()
        if Processo.query.filter_by(numero_pasta=numero_pasta).first():
            raise ValueError('Já existe um processo com este número de pasta')

        processo = Processo(
            numero_pasta=numero_pasta,
            numero_cnj=ProcessoService._validar_cnj(dados.get('numero_cnj')),
            cliente_id=cliente_id,
            contrato_id=ProcessoService._validar_contrato(dados.get('contrato_id'), cliente_id),
            status='ativo'
        )
        ProcessoService._aplicar_classificacao(processo, dados)
        if processo.status in STATUS_ENCERRADOS:
            raise ValueError('Use o encerramento para arquivar um processo')

        db.session.add(processo)
        db.session.commit()
        logger.info('Processo %s criado (cliente %s)', processo.numero_pasta, cliente_id)
        return processo

    @staticmethod
    def atualizar(processo_id, dados):
        processo = ProcessoService.obter(processo_id)

        if 'numero_cnj' in dados:
            processo.numero_cnj = ProcessoService._validar_cnj(dados['numero_cnj'], processo.id)
        if 'cliente_id' in dados and dados['cliente_id'] != processo.cliente_id:
            if not db.session.get(Cliente, dados['cliente_id']):
                raise RegistroNaoEncontrado('Cliente não encontrado')
            processo.cliente_id = dados['cliente_id']
        if 'contrato_id' in dados:
            processo.contrato_id = ProcessoService._validar_contrato(dados['contrato_id'], processo.cliente_id)

        ProcessoService._aplicar_classificacao(processo, dados)
        db.session.commit()
        return processo

    @staticmethod
    def editar_em_lote(ids, campos):
        """
        Aplica os mesmos valores (status, fase, area, responsavel) a vários processos

        Returns:
            int: Quantidade de processos atualizados
        """
        if not ids:
            raise ValueError('Selecione ao menos um processo')
        if not campos:
            raise ValueError('Informe ao menos um campo para alterar')

        valores = {}
        for campo, valor in campos.items():
            if campo not in CAMPOS_LOTE:
                raise ValueError(f'Campo não permitido na edição em lote: {campo}')
            opcoes = CAMPOS_LOTE[campo]
            if opcoes and not valor:
                raise ValueError(f'Valor obrigatório para {campo}')
            valores[campo] = _escolha(valor, opcoes, campo) if opcoes else valor

        processos = Processo.query.filter(Processo.id.in_(ids)).all()
        for processo in processos:
            for campo, valor in valores.items():
                setattr(processo, campo, valor)

        db.session.commit()
        logger.info('Edição em lote: %s processos atualizados (%s)', len(processos), ', '.join(valores))
        return len(processos)

    # ========================================================================
    # ENCERRAMENTO
    # ========================================================================

    @staticmethod
    def pendencias_encerramento(processo_id, agora=None):
        """Tarefas em aberto e audiências futuras que podem ser canceladas no encerramento"""
        processo = ProcessoService.obter(processo_id)
        agora = agora or datetime.now()

        tarefas = processo.tarefas.filter(Tarefa.status.in_(('pendente', 'em_andamento'))) \
            .order_by(Tarefa.data_inicio).all()
        audiencias = processo.audiencias.filter(Audiencia.status == 'agendada',
                                                Audiencia.data_hora >= agora) \
            .order_by(Audiencia.data_hora).all()

        return {
            'tarefas': [t.to_dict() for t in tarefas],
            'audiencias': [a.to_dict() for a in audiencias]
        }

    @staticmethod
    def encerrar(processo_id, dados, hoje=None):
        """
        Encerra o processo

        O status final é inferido: 'acordo' se houve acordo, 'transito_julgado'
        se transitou em julgado, senão 'arquivado'.

        Args:
            dados (dict): houve_acordo, transitou_julgado, resultado, valor_acordo,
                valor_condenacao, data_encerramento, data_transito_julgado,
                resumo_encerramento, cancelar_tarefas_ids, cancelar_audiencias_ids

        Returns:
            dict: processo, tarefas_canceladas, audiencias_canceladas
        """
        processo = ProcessoService.obter(processo_id)
        hoje = hoje or date.today()

        if processo.status in STATUS_ENCERRADOS:
            raise ValueError('Processo já está encerrado')

        houve_acordo = bool(dados.get('houve_acordo'))
        transitou = bool(dados.get('transitou_julgado'))
        if houve_acordo:
            status = 'acordo'
        elif transitou:
            status = 'transito_julgado'
        else:
            status = 'arquivado'

        data_encerramento = parse_date(dados.get('data_encerramento')) or hoje

        processo.status = status
        processo.resultado = _escolha(dados.get('resultado'), RESULTADOS, 'Resultado')
        processo.data_encerramento = data_encerramento
        processo.data_arquivamento = data_encerramento
        processo.encerrado_em = datetime.utcnow()
        processo.resumo_encerramento = dados.get('resumo_encerramento')
        processo.valor_acordo = dados.get('valor_acordo') if houve_acordo else None
        processo.valor_condenacao = dados.get('valor_condenacao')
        if transitou:
            processo.data_transito_julgado = parse_date(dados.get('data_transito_julgado')) or data_encerramento

        tarefas_canceladas = 0
        ids_tarefas = dados.get('cancelar_tarefas_ids') or []
        if ids_tarefas:
            for tarefa in processo.tarefas.filter(Tarefa.id.in_(ids_tarefas),
                                                  Tarefa.status.in_(('pendente', 'em_andamento'))):
                tarefa.status = 'cancelada'
                tarefas_canceladas += 1

        audiencias_canceladas = 0
        ids_audiencias = dados.get('cancelar_audiencias_ids') or []
        if ids_audiencias:
            for audiencia in processo.audiencias.filter(Audiencia.id.in_(ids_audiencias),
                                                        Audiencia.status == 'agendada'):
                audiencia.status = 'cancelada'
                audiencias_canceladas += 1

        db.session.commit()
        logger.info('Processo %s encerrado como %s (%s tarefas e %s audiências canceladas)',
                    processo.numero_pasta, status, tarefas_canceladas, audiencias_canceladas)

        return {
            'processo': processo,
            'tarefas_canceladas': tarefas_canceladas,
            'audiencias_canceladas': audiencias_canceladas
        }
