"""
Rotas da API para Contas Bancárias e lançamentos

Endpoints:
- GET    /api/contas                       - Listar contas (ativa=true/false/todas)
- GET    /api/contas/saldo-total           - Saldo somado das contas ativas
- GET    /api/contas/<id>                  - Buscar uma conta
- POST   /api/contas                       - Criar conta (saldo inicial vira lançamento)
- PUT    /api/contas/<id>                  - Atualizar conta
- DELETE /api/contas/<id>                  - Inativar conta (não remove do BD)
- POST   /api/contas/<id>/ativar           - Reativar conta
- GET    /api/contas/<id>/lancamentos      - Lançamentos da conta (periodo=semana|mes|todos)
- POST   /api/contas/<id>/lancamentos      - Lançamento manual (entrada/saida)
- POST   /api/contas/transferencias        - Transferência entre contas
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
from gestao_juridica.services.listagem import ler_bool

logger = logging.getLogger(__name__)

contas_bancarias_bp = Blueprint('contas_bancarias', __name__)


@contas_bancarias_bp.route('', methods=['GET'])
def listar_contas():
    """
    Query params:
        ativa: true/false (padrão: true); 'todas' lista ativas e inativas
    """
    try:
        filtro = request.args.get('ativa')
        ativa = None if filtro == 'todas' else ler_bool(filtro)
        contas = ContaBancariaService.listar(ativa=True if filtro is None else ativa)
        return jsonify({
            'success': True,
            'data': [conta.to_dict() for conta in contas],
            'total': len(contas)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/saldo-total', methods=['GET'])
def saldo_total():
    try:
        return jsonify({'success': True, 'data': {'saldo_total': ContaBancariaService.saldo_total()}}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/<int:id>', methods=['GET'])
def buscar_conta(id):
    try:
        return jsonify({'success': True, 'data': ContaBancariaService.obter(id).to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('', methods=['POST'])
def criar_conta():
    """
    Body params:
        banco: str (obrigatório)
        tipo_conta: corrente, poupanca, investimento, caixa
        agencia, numero_conta, titular, cor
        saldo_inicial: float (padrão 0)
        conta_principal: bool
    """
    try:
        conta = ContaBancariaService.criar(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Conta criada com sucesso',
            'data': conta.to_dict()
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/<int:id>', methods=['PUT'])
def atualizar_conta(id):
    try:
        conta = ContaBancariaService.atualizar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Conta atualizada com sucesso',
            'data': conta.to_dict()
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/<int:id>', methods=['DELETE'])
def inativar_conta(id):
    try:
        ContaBancariaService.inativar(id)
        return jsonify({'success': True, 'message': 'Conta inativada com sucesso'}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/<int:id>/ativar', methods=['POST'])
def ativar_conta(id):
    try:
        conta = ContaBancariaService.ativar(id)
        return jsonify({'success': True, 'message': 'Conta reativada', 'data': conta.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/<int:id>/lancamentos', methods=['GET'])
def listar_lancamentos(id):
    try:
        lancamentos = ContaBancariaService.listar_lancamentos(id, request.args.get('periodo', 'todos'))
        return jsonify({
            'success': True,
            'data': [l.to_dict() for l in lancamentos],
            'total': len(lancamentos)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/<int:id>/lancamentos', methods=['POST'])
def lancamento_manual(id):
    """
    Body params:
        tipo: entrada/saida (obrigatório)
        valor: float (obrigatório)
        descricao: str (obrigatório)
        categoria, data_lancamento
    """
    try:
        lancamento = ContaBancariaService.lancar_manual(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Lançamento registrado',
            'data': lancamento.to_dict()
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@contas_bancarias_bp.route('/transferencias', methods=['POST'])
def transferir():
    """
    Body params:
        conta_origem_id, conta_destino_id, valor (obrigatórios)
        descricao, data_transferencia
    """
    try:
        transferencia = ContaBancariaService.transferir(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Transferência realizada com sucesso',
            'data': transferencia.to_dict()
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)
