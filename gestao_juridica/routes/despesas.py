"""
Rotas da API para Despesas

Endpoints:
- GET    /api/despesas                  - Listar despesas (filtros, paginação)
- GET    /api/despesas/<id>             - Buscar despesa
- POST   /api/despesas                  - Criar despesa
- PUT    /api/despesas/<id>             - Atualizar despesa pendente/atrasada
- POST   /api/despesas/<id>/pagar       - Pagar (lança saída na conta)
- POST   /api/despesas/<id>/cancelar    - Cancelar
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services.despesa_service import DespesaService
from gestao_juridica.services.listagem import ler_paginacao, ler_bool

logger = logging.getLogger(__name__)

despesas_bp = Blueprint('despesas', __name__)


@despesas_bp.route('', methods=['GET'])
def listar_despesas():
    """
    Query params:
        status, categoria, processo_id, cliente_id, reembolsavel
        vencimento_inicio, vencimento_fim, busca, pagina, por_pagina
    """
    try:
        pagina, por_pagina = ler_paginacao(request.args)
        filtros = {campo: request.args.get(campo) for campo in
                   ('status', 'categoria', 'processo_id', 'cliente_id', 'vencimento_inicio',
                    'vencimento_fim', 'busca')}
        filtros['reembolsavel'] = ler_bool(request.args.get('reembolsavel'))

        resultado = DespesaService.listar(filtros, pagina, por_pagina)
        return jsonify({
            'success': True,
            'data': [d.to_dict() for d in resultado['itens']],
            'total': resultado['total'],
            'pagina': resultado['pagina'],
            'total_paginas': resultado['total_paginas']
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@despesas_bp.route('/<int:id>', methods=['GET'])
def buscar_despesa(id):
    try:
        return jsonify({'success': True, 'data': DespesaService.obter(id).to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@despesas_bp.route('', methods=['POST'])
def criar_despesa():
    """
    Body params:
        descricao, valor, data_vencimento (obrigatórios)
        categoria, fornecedor, processo_id, cliente_id, reembolsavel, forma_pagamento, observacoes
    """
    try:
        despesa = DespesaService.criar(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Despesa criada com sucesso',
            'data': despesa.to_dict()
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@despesas_bp.route('/<int:id>', methods=['PUT'])
def atualizar_despesa(id):
    try:
        despesa = DespesaService.atualizar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Despesa atualizada com sucesso',
            'data': despesa.to_dict()
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@despesas_bp.route('/<int:id>/pagar', methods=['POST'])
def pagar_despesa(id):
    """
    Body params:
        conta_bancaria_id: int (obrigatório)
        data_pagamento, forma_pagamento
    """
    try:
        despesa = DespesaService.pagar(id, request.get_json() or {})
        return jsonify({'success': True, 'message': 'Pagamento registrado', 'data': despesa.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@despesas_bp.route('/<int:id>/cancelar', methods=['POST'])
def cancelar_despesa(id):
    try:
        despesa = DespesaService.cancelar(id)
        return jsonify({'success': True, 'message': 'Despesa cancelada', 'data': despesa.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)
