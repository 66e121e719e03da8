"""
Serviço de Despesas - custas, perícias, diligências e despesas do escritório
"""
import logging
from datetime import date

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, Despesa, Processo, Cliente
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService, para_decimal
from gestao_juridica.services.listagem import paginar
from gestao_juridica.services.periodos import parse_date

logger = logging.getLogger(__name__)

CATEGORIAS = (
    'custas', 'honorarios_perito', 'oficial_justica', 'correios', 'cartorio', 'copia',
    'deslocamento', 'hospedagem', 'alimentacao', 'publicacao', 'certidao', 'protesto',
    'aluguel', 'fornecedor', 'salarios', 'impostos', 'outra'
)
STATUS = ('pendente', 'pago', 'atrasado', 'cancelado')
FORMAS_PAGAMENTO = ('dinheiro', 'pix', 'ted', 'boleto', 'cartao_credito', 'cartao_debito')

STATUS_PAGAVEIS = ('pendente', 'atrasado')


class DespesaService:
    """
    Serviço para gerenciamento de despesas
    """

    CAMPOS_TEXTO = ('fornecedor', 'observacoes')

    @staticmethod
    def _validar(dados):
        if 'categoria' in dados and dados['categoria'] not in CATEGORIAS:
            raise ValueError(f'Categoria inválida. Use uma das seguintes: {", ".join(CATEGORIAS)}')
        if dados.get('forma_pagamento') and dados['forma_pagamento'] not in FORMAS_PAGAMENTO:
            raise ValueError(f'Forma de pagamento inválida. Use uma das seguintes: {", ".join(FORMAS_PAGAMENTO)}')
        if dados.get('processo_id') and not db.session.get(Processo, dados['processo_id']):
            raise RegistroNaoEncontrado('Processo não encontrado')
        if dados.get('cliente_id') and not db.session.get(Cliente, dados['cliente_id']):
            raise RegistroNaoEncontrado('Cliente não encontrado')

    @staticmethod
    def criar(dados):
        """
        Cria uma despesa

        Args:
            dados (dict): descricao, valor, data_vencimento (obrigatórios), categoria,
                fornecedor, processo_id, cliente_id, reembolsavel, forma_pagamento

        Returns:
            Despesa: Objeto criado

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

        dados = {'categoria': 'outra', **dados}
        DespesaService._validar(dados)

        cliente_id = dados.get('cliente_id')
        if not cliente_id and dados.get('processo_id'):
            cliente_id = db.session.get(Processo, dados['processo_id']).cliente_id

        despesa = Despesa(
            categoria=dados['categoria'],
            fornecedor=dados.get('fornecedor'),
            descricao=dados['descricao'],
            valor=valor,
            data_vencimento=vencimento,
            status='pendente',
            forma_pagamento=dados.get('forma_pagamento'),
            processo_id=dados.get('processo_id'),
            cliente_id=cliente_id,
            reembolsavel=bool(dados.get('reembolsavel', False)),
            observacoes=dados.get('observacoes')
        )
        db.session.add(despesa)
        db.session.commit()
        return despesa

    @staticmethod
    def obter(despesa_id):
        despesa = db.session.get(Despesa, despesa_id)
        if not despesa:
            raise RegistroNaoEncontrado('Despesa não encontrada')
        return despesa

    @staticmethod
    def listar(filtros=None, pagina=1, por_pagina=50):
        filtros = filtros or {}
        query = Despesa.query

        for campo in ('status', 'categoria', 'processo_id', 'cliente_id'):
            if filtros.get(campo):
                query = query.filter(getattr(Despesa, campo) == filtros[campo])
        if filtros.get('reembolsavel') is not None:
            query = query.filter(Despesa.reembolsavel.is_(bool(filtros['reembolsavel'])))

        inicio = parse_date(filtros.get('vencimento_inicio'))
        fim = parse_date(filtros.get('vencimento_fim'))
        if inicio:
            query = query.filter(Despesa.data_vencimento >= inicio)
        if fim:
            query = query.filter(Despesa.data_vencimento <= fim)

        if filtros.get('busca'):
            termo = f'%{filtros["busca"]}%'
            query = query.filter(Despesa.descricao.ilike(termo) | Despesa.fornecedor.ilike(termo))

        return paginar(query.order_by(Despesa.data_vencimento, Despesa.id), pagina, por_pagina)

    @staticmethod
    def atualizar(despesa_id, dados):
        despesa = DespesaService.obter(despesa_id)
        if despesa.status not in STATUS_PAGAVEIS:
            raise ValueError('Apenas despesas pendentes ou atrasadas podem ser editadas')

        DespesaService._validar(dados)

        if 'descricao' in dados:
            if not dados['descricao']:
                raise ValueError('Descrição é obrigatória')
            despesa.descricao = dados['descricao']
        if 'valor' in dados:
            valor = para_decimal(dados['valor'])
            if valor <= 0:
                raise ValueError('Valor deve ser maior que zero')
            despesa.valor = valor
        if 'data_vencimento' in dados:
            vencimento = parse_date(dados['data_vencimento'])
            if not vencimento:
                raise ValueError('Data de vencimento é obrigatória')
            despesa.data_vencimento = vencimento
            if despesa.status == 'atrasado' and vencimento >= date.today():
                despesa.status = 'pendente'

        for campo in ('categoria', 'forma_pagamento', 'processo_id', 'cliente_id', 'reembolsavel') + DespesaService.CAMPOS_TEXTO:
            if campo in dados:
                setattr(despesa, campo, dados[campo])

        db.session.commit()
        return despesa

    @staticmethod
    def pagar(despesa_id, dados, commit=True):
        """
        Paga a despesa e lança a saída na conta

        Args:
            dados (dict): conta_bancaria_id (obrigatório), data_pagamento, forma_pagamento
        """
        despesa = DespesaService.obter(despesa_id)
        if despesa.status not in STATUS_PAGAVEIS:
            raise ValueError(f'Despesa com status {despesa.status} não pode ser paga')
        if not dados.get('conta_bancaria_id'):
            raise ValueError('Conta bancária é obrigatória')

        conta = ContaBancariaService.obter_ativa(dados['conta_bancaria_id'])
        forma = dados.get('forma_pagamento') or despesa.forma_pagamento
        if forma and forma not in FORMAS_PAGAMENTO:
            raise ValueError(f'Forma de pagamento inválida. Use uma das seguintes: {", ".join(FORMAS_PAGAMENTO)}')
        data_pagamento = parse_date(dados.get('data_pagamento')) or date.today()

        despesa.status = 'pago'
        despesa.data_pagamento = data_pagamento
        despesa.forma_pagamento = forma
        despesa.conta_bancaria_id = conta.id

        descricao = f'{despesa.fornecedor} - {despesa.descricao}' if despesa.fornecedor else despesa.descricao
        ContaBancariaService.lancar(conta, 'saida', despesa.valor, descricao,
                                    categoria=despesa.categoria, data_lancamento=data_pagamento,
                                    origem_tipo='despesa', origem_id=despesa.id)
        if commit:
            db.session.commit()
        logger.info('Despesa %s paga: R$ %s pela conta %s', despesa.id, despesa.valor, conta.id)
        return despesa

    @staticmethod
    def cancelar(despesa_id, commit=True):
        despesa = DespesaService.obter(despesa_id)
        if despesa.status not in STATUS_PAGAVEIS:
            raise ValueError(f'Despesa com status {despesa.status} não pode ser cancelada')
        despesa.status = 'cancelado'
        if commit:
            db.session.commit()
        return despesa
