"""
Serviço de Receitas - Lógica de negócio para honorários e demais receitas

Este serviço implementa:
1. Cadastro de receitas (avulsas, honorários, parceladas e recorrentes)
2. Recebimento total e parcial (o restante vira uma receita tipo 'saldo')
3. Cancelamento
4. Geração das próximas ocorrências de receitas recorrentes
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta
from sqlalchemy import or_

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, Receita, Cliente, Processo, ContratoHonorario
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService, para_decimal
from gestao_juridica.services.listagem import paginar
from gestao_juridica.services.periodos import parse_date, primeiro_dia_mes, ultimo_dia_mes

logger = logging.getLogger(__name__)

TIPOS = ('honorario', 'parcela', 'avulso', 'saldo')
STATUS = ('pendente', 'pago', 'parcial', 'atrasado', 'cancelado', 'faturado')
CATEGORIAS = ('honorario', 'consultoria', 'parecer', 'acordo', 'exito', 'avulso', 'recorrente')
FORMAS_PAGAMENTO = ('dinheiro', 'pix', 'ted', 'boleto', 'cartao_credito', 'cartao_debito')
FREQUENCIAS = {'mensal': 1, 'trimestral': 3, 'semestral': 6, 'anual': 12}

STATUS_RECEBIVEIS = ('pendente', 'atrasado', 'faturado')
STATUS_FINAIS = ('pago', 'cancelado')


def dividir_valor(total, parcelas):
    """
    Divide o total em N parcelas com 2 casas; a diferença de arredondamento vai para a última

    Returns:
        list[Decimal]: Valores das parcelas (soma exata = total)
    """
    total = Decimal(str(total))
    parcelas = int(parcelas)
    if parcelas < 1:
        raise ValueError('Número de parcelas deve ser maior que zero')
    base = (total / parcelas).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    valores = [base] * (parcelas - 1)
    valores.append(total - base * (parcelas - 1))
    return valores


def _data_no_mes(referencia, dia):
    """Mesma data de referência com o dia ajustado ao tamanho do mês"""
    return referencia.replace(day=min(int(dia), ultimo_dia_mes(referencia.year, referencia.month)))


class ReceitaService:
    """
    Serviço para gerenciamento completo de receitas
    """

    # ========================================================================
    # VALIDAÇÕES
    # ========================================================================

    @staticmethod
    def _escolha(valor, opcoes, rotulo):
        if valor not in opcoes:
            raise ValueError(f'{rotulo} inválido(a). Use um dos seguintes: {", ".join(opcoes)}')
        return valor

    @staticmethod
    def _validar_vinculos(dados):
        """Confere cliente/processo/contrato e herda o cliente do contrato ou processo"""
        cliente_id = dados.get('cliente_id')

        contrato_id = dados.get('contrato_id')
        if contrato_id:
            contrato = db.session.get(ContratoHonorario, contrato_id)
            if not contrato:
                raise RegistroNaoEncontrado('Contrato não encontrado')
            cliente_id = cliente_id or contrato.cliente_id

        processo_id = dados.get('processo_id')
        if processo_id:
            processo = db.session.get(Processo, processo_id)
            if not processo:
                raise RegistroNaoEncontrado('Processo não encontrado')
            cliente_id = cliente_id or processo.cliente_id

        if cliente_id and not db.session.get(Cliente, cliente_id):
            raise RegistroNaoEncontrado('Cliente não encontrado')

        return cliente_id, processo_id, contrato_id

    @staticmethod
    def _validar_config_recorrencia(config):
        config = dict(config or {})
        frequencia = config.get('frequencia', 'mensal')
        if frequencia not in FREQUENCIAS:
            raise ValueError(f'Frequência inválida. Use uma das seguintes: {", ".join(FREQUENCIAS)}')
        config['frequencia'] = frequencia
        if config.get('dia_vencimento'):
            dia = int(config['dia_vencimento'])
            if not 1 <= dia <= 31:
                raise ValueError('Dia de vencimento deve estar entre 1 e 31')
            config['dia_vencimento'] = dia
        if config.get('data_fim'):
            config['data_fim'] = parse_date(config['data_fim']).isoformat()
        return config

    # ========================================================================
    # CADASTRO
    # ========================================================================

    @staticmethod
    def criar(dados):
        """
        Cria uma receita

        Se parcelado com numero_parcelas > 1, a receita criada é o agrupador
        (guarda o total) e N parcelas mensais tipo 'parcela' são geradas.

        Args:
            dados (dict): descricao, valor, data_vencimento (obrigatórios),
                tipo, categoria, cliente_id, processo_id, contrato_id,
                parcelado, numero_parcelas, recorrente, config_recorrencia

        Returns:
            Receita: Receita criada (o agrupador, se parcelada)

        Raises:
            ValueError: Se dados inválidos
        """
        if not dados.get('descricao'):
            raise ValueError('Descrição é obrigatória')

        valor = para_decimal(dados.get('valor'))
        if valor <= 0:
            raise ValueError('Valor deve ser maior que zero')

        vencimento = parse_date(dados.get('data_vencimento'))
        if not vencimento:
            raise ValueError('Data de vencimento é obrigatória')

        cliente_id, processo_id, contrato_id = ReceitaService._validar_vinculos(dados)
        tipo = ReceitaService._escolha(dados.get('tipo') or ('honorario' if contrato_id else 'avulso'),
                                       ('honorario', 'avulso'), 'Tipo')
        categoria = ReceitaService._escolha(dados.get('categoria') or 'honorario', CATEGORIAS, 'Categoria')
        forma = dados.get('forma_pagamento')
        if forma:
            ReceitaService._escolha(forma, FORMAS_PAGAMENTO, 'Forma de pagamento')

        numero_parcelas = int(dados.get('numero_parcelas') or 1)
        parcelado = bool(dados.get('parcelado')) and numero_parcelas > 1
        recorrente = bool(dados.get('recorrente'))
        if parcelado and recorrente:
            raise ValueError('Receita não pode ser parcelada e recorrente ao mesmo tempo')

        receita = Receita(
            tipo=tipo,
            cliente_id=cliente_id,
            processo_id=processo_id,
            contrato_id=contrato_id,
            descricao=dados['descricao'],
            categoria=categoria,
            valor=valor,
            data_vencimento=vencimento,
            data_competencia=primeiro_dia_mes(vencimento),
            status='pendente',
            forma_pagamento=forma,
            recorrente=recorrente,
            config_recorrencia=ReceitaService._validar_config_recorrencia(
                dados.get('config_recorrencia')) if recorrente else None,
            parcelado=parcelado,
            numero_parcelas=numero_parcelas if parcelado else None,
            dias_atraso=0,
            observacoes=dados.get('observacoes')
        )
        db.session.add(receita)
        db.session.flush()

        if parcelado:
            for numero, valor_parcela in enumerate(dividir_valor(valor, numero_parcelas), start=1):
                venc_parcela = vencimento + relativedelta(months=numero - 1)
                db.session.add(Receita(
                    tipo='parcela',
                    cliente_id=cliente_id,
                    processo_id=processo_id,
                    contrato_id=contrato_id,
                    receita_pai_id=receita.id,
                    numero_parcela=numero,
                    descricao=f'{receita.descricao} ({numero}/{numero_parcelas})',
                    categoria=categoria,
                    valor=valor_parcela,
                    data_vencimento=venc_parcela,
                    data_competencia=primeiro_dia_mes(venc_parcela),
                    status='pendente',
                    forma_pagamento=forma,
                    dias_atraso=0
                ))

        db.session.commit()
        logger.info('Receita %s criada (%s, R$ %s)', receita.id, receita.tipo, receita.valor)
        return receita

    @staticmethod
    def obter(receita_id):
        receita = db.session.get(Receita, receita_id)
        if not receita:
            raise RegistroNaoEncontrado('Receita não encontrada')
        return receita

    @staticmethod
    def detalhar(receita_id):
        receita = ReceitaService.obter(receita_id)
        dados = receita.to_dict()
        dados['parcelas'] = [p.to_dict() for p in receita.parcelas]
        dados['saldos'] = [s.to_dict() for s in receita.saldos]
        return dados

    @staticmethod
    def listar(filtros=None, pagina=1, por_pagina=50):
        """
        Lista receitas com filtros

        Args:
            filtros (dict): status, tipo, categoria, cliente_id, processo_id, contrato_id,
                recorrente, vencimento_inicio, vencimento_fim, busca, incluir_agrupadas

        Returns:
            dict: Resultado paginado
        """
        filtros = filtros or {}
        query = Receita.query

        # Agrupadores de parcelamento só aparecem quando pedidos explicitamente
        if not filtros.get('incluir_agrupadas'):
            query = query.filter(or_(Receita.parcelado.is_(False), Receita.parcelado.is_(None)))

        for campo in ('status', 'tipo', 'categoria', 'cliente_id', 'processo_id', 'contrato_id'):
            if filtros.get(campo):
                query = query.filter(getattr(Receita, campo) == filtros[campo])

        if filtros.get('recorrente') is not None:
            query = query.filter(Receita.recorrente.is_(bool(filtros['recorrente'])))

        inicio = parse_date(filtros.get('vencimento_inicio'))
        fim = parse_date(filtros.get('vencimento_fim'))
        if inicio:
            query = query.filter(Receita.data_vencimento >= inicio)
        if fim:
            query = query.filter(Receita.data_vencimento <= fim)

        if filtros.get('busca'):
            query = query.filter(Receita.descricao.ilike(f'%{filtros["busca"]}%'))

        query = query.order_by(Receita.data_vencimento, Receita.id)
        return paginar(query, pagina, por_pagina)

    @staticmethod
    def atualizar(receita_id, dados):
        receita = ReceitaService.obter(receita_id)
        if receita.status not in ('pendente', 'atrasado'):
            raise ValueError('Apenas receitas pendentes ou atrasadas podem ser editadas')

        if 'descricao' in dados:
            if not dados['descricao']:
                raise ValueError('Descrição é obrigatória')
            receita.descricao = dados['descricao']
        if 'valor' in dados:
            if receita.parcelado:
                raise ValueError('Edite o valor das parcelas individualmente')
            valor = para_decimal(dados['valor'])
            if valor <= 0:
                raise ValueError('Valor deve ser maior que zero')
            receita.valor = valor
        if 'data_vencimento' in dados:
            vencimento = parse_date(dados['data_vencimento'])
            if not vencimento:
                raise ValueError('Data de vencimento é obrigatória')
            receita.data_vencimento = vencimento
            receita.data_competencia = primeiro_dia_mes(vencimento)
            if receita.status == 'atrasado' and vencimento >= date.today():
                receita.status = 'pendente'
                receita.dias_atraso = 0
        if 'categoria' in dados:
            receita.categoria = ReceitaService._escolha(dados['categoria'], CATEGORIAS, 'Categoria')
        if 'forma_pagamento' in dados and dados['forma_pagamento']:
            receita.forma_pagamento = ReceitaService._escolha(dados['forma_pagamento'], FORMAS_PAGAMENTO,
                                                              'Forma de pagamento')
        if 'observacoes' in dados:
            receita.observacoes = dados['observacoes']

        db.session.commit()
        return receita

    @staticmethod
    def cancelar(receita_id, commit=True):
        """Cancela a receita; num agrupador, cancela também as parcelas em aberto"""
        receita = ReceitaService.obter(receita_id)
        if receita.status in STATUS_FINAIS or receita.status == 'parcial':
            raise ValueError(f'Receita com status {receita.status} não pode ser cancelada')

        receita.status = 'cancelado'
        if receita.parcelado:
            for parcela in receita.parcelas.filter(Receita.status.in_(STATUS_RECEBIVEIS)):
                parcela.status = 'cancelado'

        if commit:
            db.session.commit()
        return receita

    # ========================================================================
    # RECEBIMENTO
    # ========================================================================

    @staticmethod
    def _validar_recebimento(receita, dados):
        if receita.parcelado:
            raise ValueError('Receba as parcelas individualmente')
        if receita.status not in STATUS_RECEBIVEIS:
            raise ValueError(f'Receita com status {receita.status} não pode ser recebida')

        if not dados.get('conta_bancaria_id'):
            raise ValueError('Conta bancária é obrigatória')
        conta = ContaBancariaService.obter_ativa(dados['conta_bancaria_id'])

        forma = dados.get('forma_pagamento') or receita.forma_pagamento
        if forma:
            ReceitaService._escolha(forma, FORMAS_PAGAMENTO, 'Forma de pagamento')
        return conta, forma

    @staticmethod
    def receber(receita_id, dados, commit=True):
        """
        Registra o recebimento total da receita e lança a entrada na conta

        Args:
            dados (dict): conta_bancaria_id (obrigatório), valor_pago (padrão: valor),
                data_pagamento (padrão: hoje), forma_pagamento

        Returns:
            Receita: Receita paga
        """
        receita = ReceitaService.obter(receita_id)
        conta, forma = ReceitaService._validar_recebimento(receita, dados)

        valor_pago = para_decimal(dados.get('valor_pago') or receita.valor, 'Valor pago')
        if valor_pago < Decimal(receita.valor):
            raise ValueError('Valor menor que o da receita: use o recebimento parcial')

        data_pagamento = parse_date(dados.get('data_pagamento')) or date.today()

        receita.status = 'pago'
        receita.valor_pago = valor_pago
        receita.data_pagamento = data_pagamento
        receita.forma_pagamento = forma
        receita.conta_bancaria_id = conta.id
        receita.dias_atraso = max((data_pagamento - receita.data_vencimento).days, 0)

        ContaBancariaService.lancar(conta, 'entrada', valor_pago, receita.descricao,
                                    categoria=receita.categoria, data_lancamento=data_pagamento,
                                    origem_tipo='receita', origem_id=receita.id)
        if commit:
            db.session.commit()
        logger.info('Receita %s recebida: R$ %s na conta %s', receita.id, valor_pago, conta.id)
        return receita

    @staticmethod
    def receber_parcial(receita_id, dados):
        """
        Recebimento parcial: a receita fica 'parcial' e o restante vira uma nova
        receita tipo 'saldo' com novo vencimento

        Args:
            dados (dict): valor_pago, nova_data_vencimento, conta_bancaria_id (obrigatórios),
                data_pagamento, forma_pagamento

        Returns:
            Receita: A receita de saldo criada (ou a própria receita, se o valor quitar tudo)
        """
        receita = ReceitaService.obter(receita_id)
        conta, forma = ReceitaService._validar_recebimento(receita, dados)

        valor_pago = para_decimal(dados.get('valor_pago'), 'Valor pago')
        if valor_pago <= 0:
            raise ValueError('Valor pago deve ser maior que zero')
        if valor_pago >= Decimal(receita.valor):
            return ReceitaService.receber(receita_id, dados)

        nova_data = parse_date(dados.get('nova_data_vencimento'))
        if not nova_data:
            raise ValueError('Nova data de vencimento do saldo é obrigatória')

        data_pagamento = parse_date(dados.get('data_pagamento')) or date.today()
        restante = Decimal(receita.valor) - valor_pago

        receita.status = 'parcial'
        receita.valor_pago = valor_pago
        receita.data_pagamento = data_pagamento
        receita.forma_pagamento = forma
        receita.conta_bancaria_id = conta.id

        saldo = Receita(
            tipo='saldo',
            cliente_id=receita.cliente_id,
            processo_id=receita.processo_id,
            contrato_id=receita.contrato_id,
            receita_origem_id=receita.id,
            descricao=f'Saldo - {receita.descricao}',
            categoria=receita.categoria,
            valor=restante,
            data_vencimento=nova_data,
            data_competencia=primeiro_dia_mes(nova_data),
            status='pendente',
            forma_pagamento=forma,
            dias_atraso=0
        )
        db.session.add(saldo)

        ContaBancariaService.lancar(conta, 'entrada', valor_pago, f'{receita.descricao} (parcial)',
                                    categoria=receita.categoria, data_lancamento=data_pagamento,
                                    origem_tipo='receita', origem_id=receita.id)
        db.session.commit()
        logger.info('Receita %s recebida parcialmente: R$ %s; saldo %s de R$ %s',
                    receita.id, valor_pago, saldo.id, restante)
        return saldo

    # ========================================================================
    # RECORRÊNCIA
    # ========================================================================

    @staticmethod
    def gerar_recorrentes(ate=None):
        """
        Gera as ocorrências de receitas recorrentes com vencimento até `ate`

        Idempotente: não duplica uma competência já gerada.

        Returns:
            list[Receita]: Receitas criadas
        """
        ate = parse_date(ate) or date.today()
        criadas = []

        modelos = Receita.query.filter(Receita.recorrente.is_(True),
                                       Receita.receita_recorrente_id.is_(None),
                                       Receita.status != 'cancelado').all()
        for modelo in modelos:
            config = modelo.config_recorrencia or {}
            meses = FREQUENCIAS.get(config.get('frequencia', 'mensal'), 1)
            data_fim = parse_date(config.get('data_fim'))
            dia = config.get('dia_vencimento') or modelo.data_vencimento.day

            existentes = {r.data_competencia for r in Receita.query.filter_by(receita_recorrente_id=modelo.id)}
            existentes.add(modelo.data_competencia)

            passo = 1
            while True:
                vencimento = _data_no_mes(modelo.data_vencimento.replace(day=1) + relativedelta(months=meses * passo), dia)
                if vencimento > ate or (data_fim and vencimento > data_fim):
                    break
                passo += 1
                if primeiro_dia_mes(vencimento) in existentes:
                    continue

                ocorrencia = Receita(
                    tipo=modelo.tipo,
                    cliente_id=modelo.cliente_id,
                    processo_id=modelo.processo_id,
                    contrato_id=modelo.contrato_id,
                    receita_recorrente_id=modelo.id,
                    descricao=modelo.descricao,
                    categoria=modelo.categoria,
                    valor=modelo.valor,
                    data_vencimento=vencimento,
                    data_competencia=primeiro_dia_mes(vencimento),
                    status='pendente',
                    forma_pagamento=modelo.forma_pagamento,
                    dias_atraso=0
                )
                db.session.add(ocorrencia)
                existentes.add(ocorrencia.data_competencia)
                criadas.append(ocorrencia)

        db.session.commit()
        if criadas:
            logger.info('%s receitas recorrentes geradas até %s', len(criadas), ate)
        return criadas
