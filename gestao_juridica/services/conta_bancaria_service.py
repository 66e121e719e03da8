"""
Serviço de Contas Bancárias - saldo, lançamentos e transferências

Todo movimento de saldo passa por ContaBancariaService.lancar, que grava
o lançamento com o saldo resultante (saldo_apos_lancamento).
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from sqlalchemy import func

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, ContaBancaria, Lancamento, Transferencia
from gestao_juridica.services.periodos import inicio_periodo_extrato, parse_date

logger = logging.getLogger(__name__)

TIPOS_CONTA = ('corrente', 'poupanca', 'investimento', 'caixa')
TIPOS_LANCAMENTO = ('entrada', 'saida')
ORIGENS = ('receita', 'despesa', 'transferencia', 'manual')


def para_decimal(valor, rotulo='Valor'):
    if valor is None or valor == '':
        raise ValueError(f'{rotulo} é obrigatório')
    try:
        return Decimal(str(valor)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError):
        raise ValueError(f'{rotulo} inválido: {valor}')


class ContaBancariaService:
    """
    Serviço para contas bancárias e seus lançamentos
    """

    CAMPOS_EDITAVEIS = ('banco', 'agencia', 'numero_conta', 'titular', 'cor')

    # ========================================================================
    # CRUD DE CONTAS
    # ========================================================================

    @staticmethod
    def obter(conta_id):
        conta = db.session.get(ContaBancaria, conta_id)
        if not conta:
            raise RegistroNaoEncontrado('Conta não encontrada')
        return conta

    @staticmethod
    def obter_ativa(conta_id):
        conta = ContaBancariaService.obter(conta_id)
        if not conta.ativa:
            raise ValueError(f'Conta {conta.banco} está inativa')
        return conta

    @staticmethod
    def listar(ativa=True):
        query = ContaBancaria.query
        if ativa is not None:
            query = query.filter(ContaBancaria.ativa.is_(ativa))
        return query.order_by(ContaBancaria.conta_principal.desc(), ContaBancaria.banco).all()

    @staticmethod
    def _definir_principal(conta):
        ContaBancaria.query.filter(ContaBancaria.id != conta.id, ContaBancaria.conta_principal.is_(True)) \
            .update({'conta_principal': False}, synchronize_session=False)
        conta.conta_principal = True

    @staticmethod
    def criar(dados):
        """
        Cria uma conta bancária

        Saldo inicial diferente de zero vira um lançamento manual "Saldo inicial".

        Args:
            dados (dict): banco (obrigatório), tipo_conta, agencia, numero_conta,
                titular, saldo_inicial, conta_principal

        Returns:
            ContaBancaria: Conta criada
        """
        if not dados.get('banco'):
            raise ValueError('Banco é obrigatório')

        tipo_conta = dados.get('tipo_conta', 'corrente')
        if tipo_conta not in TIPOS_CONTA:
            raise ValueError(f'Tipo de conta inválido. Use um dos seguintes: {", ".join(TIPOS_CONTA)}')

        saldo_inicial = para_decimal(dados.get('saldo_inicial') or 0, 'Saldo inicial')

        conta = ContaBancaria(
            tipo_conta=tipo_conta,
            saldo_inicial=saldo_inicial,
            saldo_atual=Decimal('0.00'),
            ativa=True,
            **{campo: dados.get(campo) for campo in ContaBancariaService.CAMPOS_EDITAVEIS}
        )
        db.session.add(conta)
        db.session.flush()

        if dados.get('conta_principal') or ContaBancaria.query.count() == 1:
            ContaBancariaService._definir_principal(conta)

        if saldo_inicial != 0:
            ContaBancariaService.lancar(
                conta,
                'entrada' if saldo_inicial > 0 else 'saida',
                abs(saldo_inicial),
                'Saldo inicial',
                categoria='saldo_inicial',
                origem_tipo='manual'
            )

        db.session.commit()
        return conta

    @staticmethod
    def atualizar(conta_id, dados):
        conta = ContaBancariaService.obter(conta_id)

        if 'banco' in dados and not dados['banco']:
            raise ValueError('Banco é obrigatório')
        if 'tipo_conta' in dados:
            if dados['tipo_conta'] not in TIPOS_CONTA:
                raise ValueError(f'Tipo de conta inválido. Use um dos seguintes: {", ".join(TIPOS_CONTA)}')
            conta.tipo_conta = dados['tipo_conta']

        for campo in ContaBancariaService.CAMPOS_EDITAVEIS:
            if campo in dados:
                setattr(conta, campo, dados[campo])

        if dados.get('conta_principal'):
            ContaBancariaService._definir_principal(conta)

        db.session.commit()
        return conta

    @staticmethod
    def inativar(conta_id):
        conta = ContaBancariaService.obter(conta_id)
        conta.ativa = False
        conta.conta_principal = False
        db.session.commit()
        return conta

    @staticmethod
    def ativar(conta_id):
        conta = ContaBancariaService.obter(conta_id)
        conta.ativa = True
        db.session.commit()
        return conta

    # ========================================================================
    # LANÇAMENTOS
    # ========================================================================

    @staticmethod
    def lancar(conta, tipo, valor, descricao, categoria='outros', data_lancamento=None,
               origem_tipo='manual', origem_id=None, transferencia_id=None):
        """
        Registra um lançamento e atualiza o saldo da conta (sem commit)

        Returns:
            Lancamento: Lançamento criado
        """
        if tipo not in TIPOS_LANCAMENTO:
            raise ValueError("Tipo de lançamento inválido. Use 'entrada' ou 'saida'")
        if origem_tipo not in ORIGENS:
            raise ValueError(f'Origem inválida. Use uma das seguintes: {", ".join(ORIGENS)}')

        valor = para_decimal(valor)
        if valor <= 0:
            raise ValueError('Valor deve ser maior que zero')

        saldo = Decimal(conta.saldo_atual or 0)
        saldo = saldo + valor if tipo == 'entrada' else saldo - valor
        conta.saldo_atual = saldo

        lancamento = Lancamento(
            conta_bancaria_id=conta.id,
            tipo=tipo,
            valor=valor,
            descricao=descricao,
            categoria=categoria or 'outros',
            data_lancamento=parse_date(data_lancamento) or date.today(),
            origem_tipo=origem_tipo,
            origem_id=origem_id,
            transferencia_id=transferencia_id,
            saldo_apos_lancamento=saldo
        )
        db.session.add(conta)
        db.session.add(lancamento)
        return lancamento

    @staticmethod
    def lancar_manual(conta_id, dados):
        """Entrada ou saída manual (ajustes, aportes, tarifas...)"""
        conta = ContaBancariaService.obter_ativa(conta_id)
        if not dados.get('descricao'):
            raise ValueError('Descrição é obrigatória')

        lancamento = ContaBancariaService.lancar(
            conta,
            dados.get('tipo'),
            dados.get('valor'),
            dados['descricao'],
            categoria=dados.get('categoria') or 'outros',
            data_lancamento=dados.get('data_lancamento'),
            origem_tipo='manual'
        )
        db.session.commit()
        return lancamento

    @staticmethod
    def transferir(dados):
        """
        Transfere valor entre duas contas ativas

        Args:
            dados (dict): conta_origem_id, conta_destino_id, valor, descricao, data_transferencia

        Returns:
            Transferencia: Registro da transferência
        """
        origem_id = dados.get('conta_origem_id')
        destino_id = dados.get('conta_destino_id')
        if not origem_id or not destino_id:
            raise ValueError('Contas de origem e destino são obrigatórias')
        if int(origem_id) == int(destino_id):
            raise ValueError('Conta de origem e destino devem ser diferentes')

        origem = ContaBancariaService.obter_ativa(origem_id)
        destino = ContaBancariaService.obter_ativa(destino_id)
        valor = para_decimal(dados.get('valor'))
        if valor <= 0:
            raise ValueError('Valor deve ser maior que zero')

        if Decimal(origem.saldo_atual or 0) < valor:
            logger.warning('Transferência deixa a conta %s com saldo negativo', origem.id)

        descricao = dados.get('descricao') or 'Transferência interna'
        data_transferencia = parse_date(dados.get('data_transferencia')) or date.today()

        transferencia = Transferencia(
            conta_origem_id=origem.id,
            conta_destino_id=destino.id,
            valor=valor,
            data_transferencia=data_transferencia,
            descricao=descricao
        )
        db.session.add(transferencia)
        db.session.flush()

        ContaBancariaService.lancar(origem, 'saida', valor, descricao, 'transferencia', data_transferencia,
                                    'transferencia', transferencia.id, transferencia.id)
        ContaBancariaService.lancar(destino, 'entrada', valor, descricao, 'transferencia', data_transferencia,
                                    'transferencia', transferencia.id, transferencia.id)

        db.session.commit()
        return transferencia

    @staticmethod
    def listar_lancamentos(conta_id, periodo='todos', hoje=None):
        ContaBancariaService.obter(conta_id)
        query = Lancamento.query.filter(Lancamento.conta_bancaria_id == conta_id)
        inicio = inicio_periodo_extrato(periodo, hoje)
        if inicio:
            query = query.filter(Lancamento.data_lancamento >= inicio)
        return query.order_by(Lancamento.data_lancamento.desc(), Lancamento.id.desc()).all()

    @staticmethod
    def saldo_total():
        total = db.session.query(func.sum(ContaBancaria.saldo_atual)) \
            .filter(ContaBancaria.ativa.is_(True)).scalar()
        return float(total or 0)
