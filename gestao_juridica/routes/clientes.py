"""
Rotas da API para Clientes

Endpoints:
- GET    /api/clientes              - Listar clientes (busca, ativo, paginação)
- GET    /api/clientes/<id>         - Buscar um cliente
- POST   /api/clientes              - Criar cliente
- PUT    /api/clientes/<id>         - Atualizar cliente
- DELETE /api/clientes/<id>         - Inativar cliente (não remove do BD)
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services.cliente_service import ClienteService
from gestao_juridica.services.listagem import ler_paginacao, ler_bool

logger = logging.getLogger(__name__)

clientes_bp = Blueprint('clientes', __name__)


@clientes_bp.route('', methods=['GET'])
def listar_clientes():
    """
    Lista clientes

    Query params:
        busca: Nome ou documento
        ativo: true/false (padrão: true)
        pagina, por_pagina
    """
    try:
        pagina, por_pagina = ler_paginacao(request.args)
        ativo = ler_bool(request.args.get('ativo'))
        resultado = ClienteService.listar(
            busca=request.args.get('busca'),
            ativo=True if ativo is None else ativo,
            pagina=pagina,
            por_pagina=por_pagina
        )
        return jsonify({
            'success': True,
            'data': [c.to_dict() for c in resultado['itens']],
            'total': resultado['total'],
            'pagina': resultado['pagina'],
            'total_paginas': resultado['total_paginas']
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@clientes_bp.route('/<int:id>', methods=['GET'])
def buscar_cliente(id):
    try:
        cliente = ClienteService.obter(id)
        dados = cliente.to_dict()
        dados['total_processos'] = cliente.processos.count()
        dados['total_contratos'] = cliente.contratos.count()
        return jsonify({'success': True, 'data': dados}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@clientes_bp.route('', methods=['POST'])
def criar_cliente():
    """
    Body params:
        nome_completo: str (obrigatório)
        tipo_pessoa: pf/pj
        cpf_cnpj, email, telefone, endereco, observacoes
    """
    try:
        cliente = ClienteService.criar(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Cliente criado com sucesso',
            'data': cliente.to_dict()
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@clientes_bp.route('/<int:id>', methods=['PUT'])
def atualizar_cliente(id):
    try:
        cliente = ClienteService.atualizar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Cliente atualizado com sucesso',
            'data': cliente.to_dict()
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@clientes_bp.route('/<int:id>', methods=['DELETE'])
def inativar_cliente(id):
    try:
        ClienteService.inativar(id)
        return jsonify({'success': True, 'message': 'Cliente inativado com sucesso'}), 200
    except Exception as e:
        return resposta_erro(e, logger)
