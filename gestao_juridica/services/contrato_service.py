"""
Serviço de Contratos de Honorários

Este serviço implementa:
1. CRUD de contratos (numeração sequencial CONT-0001)
2. Resumo financeiro do contrato a partir das receitas vinculadas
3. Métricas da carteira de contratos (recebido, pendente, inadimplência)
"""
import logging
from decimal import Decimal

from sqlalchemy import or_

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, ContratoHonorario, Cliente, Processo, Receita
from gestao_juridica.services.conta_bancaria_service import para_decimal
from gestao_juridica.services.periodos import parse_date

logger = logging.getLogger(__name__)

TIPOS_SERVICO = ('processo', 'consultoria', 'avulso', 'misto')
FORMAS_COBRANCA = ('fixo', 'por_hora', 'por_etapa', 'misto', 'por_pasta', 'por_ato', 'por_cargo', 'pro_bono')

CAMPOS_VALOR = ('valor_fixo', 'valor_hora', 'horas_estimadas', 'percentual_exito',
                'valor_minimo_exito', 'valor_por_processo')
CAMPOS_TEXTO = ('titulo', 'descricao', 'observacoes')

PREFIXO = 'CONT-'


class ContratoService:
    """
    Serviço para gerenciamento de contratos de honorários
    """

    # ========================================================================
    # CRUD
    # ========================================================================

    @staticmethod
    def proximo_numero():
        """Próximo número sequencial a partir do maior existente (CONT-0001, CONT-0002...)"""
        maior = 0
        for (numero,) in db.session.query(ContratoHonorario.numero_contrato).all():
            sufixo = (numero or '').replace(PREFIXO, '')
            if sufixo.isdigit():
                maior = max(maior, int(sufixo))
        return f'{PREFIXO}{str(maior + 1).zfill(4)}'

    @staticmethod
    def _aplicar_valores(contrato, dados):
        for campo in CAMPOS_VALOR:
            if campo in dados:
                valor = dados[campo]
                if valor in (None, ''):
                    setattr(contrato, campo, None)
                    continue
                valor = para_decimal(valor, campo)
                if valor < 0:
                    raise ValueError(f'{campo} não pode ser negativo')
                setattr(contrato, campo, valor)

        if contrato.percentual_exito is not None and contrato.percentual_exito > 100:
            raise ValueError('Percentual de êxito deve estar entre 0 e 100')

        if 'dia_cobranca' in dados:
            dia = dados['dia_cobranca']
            if dia not in (None, ''):
                dia = int(dia)
                if not 1 <= dia <= 31:
                    raise ValueError('Dia de cobrança deve estar entre 1 e 31')
            contrato.dia_cobranca = dia or None

    @staticmethod
    def _validar_forma(contrato):
        if contrato.forma_cobranca == 'fixo' and not contrato.valor_fixo:
            raise ValueError('Contrato de valor fixo exige valor_fixo')
        if contrato.forma_cobranca == 'por_hora' and not contrato.valor_hora:
            raise ValueError('Contrato por hora exige valor_hora')

    @staticmethod
    def criar(dados):
        """
        Cria um contrato de honorários

        Args:
            dados (dict): cliente_id, titulo, forma_cobranca (obrigatórios), tipo_servico,
                valor_fixo, valor_hora, percentual_exito, dia_cobranca, data_inicio...

        Returns:
            ContratoHonorario: Contrato criado

        Raises:
            ValueError: Se dados inválidos
        """
        if not dados.get('cliente_id'):
            raise ValueError('Cliente é obrigatório')
        if not db.session.get(Cliente, dados['cliente_id']):
            raise RegistroNaoEncontrado('Cliente não encontrado')
        if not dados.get('titulo'):
            raise ValueError('Título é obrigatório')

        forma = dados.get('forma_cobranca', 'fixo')
        if forma not in FORMAS_COBRANCA:
            raise ValueError(f'Forma de cobrança inválida. Use uma das seguintes: {", ".join(FORMAS_COBRANCA)}')
        tipo_servico = dados.get('tipo_servico', 'processo')
        if tipo_servico not in TIPOS_SERVICO:
            raise ValueError(f'Tipo de serviço inválido. Use um dos seguintes: {", ".join(TIPOS_SERVICO)}')

        contrato = ContratoHonorario(
            numero_contrato=ContratoService.proximo_numero(),
            cliente_id=dados['cliente_id'],
            forma_cobranca=forma,
            tipo_servico=tipo_servico,
            ativo=True,
            **{campo: dados.get(campo) for campo in CAMPOS_TEXTO}
        )
        contrato.data_inicio = parse_date(dados.get('data_inicio'))
        contrato.data_fim = parse_date(dados.get('data_fim'))
        if contrato.data_inicio and contrato.data_fim and contrato.data_fim < contrato.data_inicio:
            raise ValueError('Data final não pode ser anterior à data de início')

        ContratoService._aplicar_valores(contrato, dados)
        ContratoService._validar_forma(contrato)

        db.session.add(contrato)
        db.session.commit()
        logger.info('Contrato %s criado para o cliente %s', contrato.numero_contrato, contrato.cliente_id)
        return contrato

    @staticmethod
    def obter(contrato_id):
        contrato = db.session.get(ContratoHonorario, contrato_id)
        if not contrato:
            raise RegistroNaoEncontrado('Contrato não encontrado')
        return contrato

    @staticmethod
    def atualizar(contrato_id, dados):
        contrato = ContratoService.obter(contrato_id)

        if 'titulo' in dados and not dados['titulo']:
            raise ValueError('Título é obrigatório')
        if 'forma_cobranca' in dados:
            if dados['forma_cobranca'] not in FORMAS_COBRANCA:
                raise ValueError(f'Forma de cobrança inválida. Use uma das seguintes: {", ".join(FORMAS_COBRANCA)}')
            contrato.forma_cobranca = dados['forma_cobranca']
        if 'tipo_servico' in dados:
            if dados['tipo_servico'] not in TIPOS_SERVICO:
                raise ValueError(f'Tipo de serviço inválido. Use um dos seguintes: {", ".join(TIPOS_SERVICO)}')
            contrato.tipo_servico = dados['tipo_servico']

        for campo in CAMPOS_TEXTO:
            if campo in dados:
                setattr(contrato, campo, dados[campo])
        for campo in ('data_inicio', 'data_fim'):
            if campo in dados:
                setattr(contrato, campo, parse_date(dados[campo]))

        ContratoService._aplicar_valores(contrato, dados)
        ContratoService._validar_forma(contrato)

        db.session.commit()
        return contrato

    @staticmethod
    def inativar(contrato_id):
        contrato = ContratoService.obter(contrato_id)
        contrato.ativo = False
        db.session.commit()
        return contrato

    @staticmethod
    def vincular_processo(contrato_id, processo_id):
        contrato = ContratoService.obter(contrato_id)
        processo = db.session.get(Processo, processo_id)
        if not processo:
            raise RegistroNaoEncontrado('Processo não encontrado')
        if processo.cliente_id != contrato.cliente_id:
            raise ValueError('Processo pertence a outro cliente')
        processo.contrato_id = contrato.id
        db.session.commit()
        return processo

    @staticmethod
    def desvincular_processo(contrato_id, processo_id):
        processo = Processo.query.filter_by(id=processo_id, contrato_id=contrato_id).first()
        if not processo:
            raise RegistroNaoEncontrado('Processo não vinculado a este contrato')
        processo.contrato_id = None
        db.session.commit()
        return processo

    # ========================================================================
    # FINANCEIRO
    # ========================================================================

    @staticmethod
    def resumo_financeiro(contrato):
        """
        Totais do contrato a partir das receitas tipo honorário/parcela

        Saldos de pagamento parcial não entram: o restante já é contado como
        pendente na receita de origem.
        """
        receitas = contrato.receitas.filter(
            Receita.tipo.in_(('honorario', 'parcela')),
            Receita.status != 'cancelado',
            or_(Receita.parcelado.is_(False), Receita.parcelado.is_(None))
        ).order_by(Receita.data_vencimento, Receita.id).all()

        valor_total = Decimal('0')
        valor_recebido = Decimal('0')
        valor_pendente = Decimal('0')
        valor_atrasado = Decimal('0')
        parcelas_pagas = 0
        dias_atraso = 0
        proxima = None

        for receita in receitas:
            valor = Decimal(receita.valor)
            valor_total += valor

            if receita.status == 'pago':
                parcelas_pagas += 1
                valor_recebido += Decimal(receita.valor_pago or receita.valor)
            elif receita.status == 'parcial':
                pago = Decimal(receita.valor_pago or 0)
                valor_recebido += pago
                valor_pendente += valor - pago
            elif receita.status in ('pendente', 'atrasado', 'faturado'):
                valor_pendente += valor
                if receita.status == 'atrasado':
                    valor_atrasado += valor
                    dias_atraso = max(dias_atraso, receita.dias_atraso or 0)
                if proxima is None and receita.tipo == 'parcela':
                    proxima = receita

        if not receitas:
            # Sem receitas lançadas: estimativa pelos valores configurados
            if contrato.valor_fixo:
                valor_total += Decimal(contrato.valor_fixo)
            if contrato.valor_hora and contrato.horas_estimadas:
                valor_total += Decimal(contrato.valor_hora) * Decimal(contrato.horas_estimadas)
            valor_pendente = valor_total

        return {
            'valor_total': float(valor_total),
            'valor_recebido': float(valor_recebido),
            'valor_pendente': float(valor_pendente),
            'valor_atrasado': float(valor_atrasado),
            'total_parcelas': len(receitas),
            'parcelas_pagas': parcelas_pagas,
            'inadimplente': valor_atrasado > 0,
            'dias_atraso': dias_atraso,
            'proxima_parcela': proxima.to_dict() if proxima else None
        }

    @staticmethod
    def serializar(contrato):
        dados = contrato.to_dict()
        dados['financeiro'] = ContratoService.resumo_financeiro(contrato)
        dados['total_processos'] = contrato.processos.count()
        return dados

    @staticmethod
    def listar(cliente_id=None, ativo=None, forma_cobranca=None, inadimplente=None):
        query = ContratoHonorario.query
        if cliente_id:
            query = query.filter_by(cliente_id=cliente_id)
        if ativo is not None:
            query = query.filter(ContratoHonorario.ativo.is_(ativo))
        if forma_cobranca:
            query = query.filter_by(forma_cobranca=forma_cobranca)

        contratos = [ContratoService.serializar(c) for c in query.order_by(ContratoHonorario.numero_contrato).all()]
        if inadimplente is not None:
            contratos = [c for c in contratos if c['financeiro']['inadimplente'] == inadimplente]
        return contratos

    @staticmethod
    def metricas():
        """Indicadores da carteira de contratos"""
        contratos = ContratoHonorario.query.all()
        resumos = [(c, ContratoService.resumo_financeiro(c)) for c in contratos]

        return {
            'total_contratos': len(contratos),
            'contratos_ativos': sum(1 for c in contratos if c.ativo),
            'valor_total_contratos': round(sum(r['valor_total'] for _, r in resumos), 2),
            'valor_recebido': round(sum(r['valor_recebido'] for _, r in resumos), 2),
            'valor_pendente': round(sum(r['valor_pendente'] for _, r in resumos), 2),
            'inadimplentes': sum(1 for _, r in resumos if r['inadimplente']),
            'valor_inadimplente': round(sum(r['valor_atrasado'] for _, r in resumos), 2)
        }
