"""
Rotas da API para Receitas (honorários e demais entradas)

Endpoints:
- GET    /api/receitas                          - Listar receitas (filtros, paginação)
- GET    /api/receitas/<id>                     - Detalhe com parcelas e saldos
- POST   /api/receitas                          - Criar receita (avulsa, parcelada ou recorrente)
- PUT    /api/receitas/<id>                     - Atualizar receita pendente/atrasada
- POST   /api/receitas/<id>/cancelar            - Cancelar receita
- POST   /api/receitas/<id>/receber             - Recebimento total
- POST   /api/receitas/<id>/receber-parcial     - Recebimento parcial (gera receita de saldo)
- POST   /api/receitas/gerar-recorrentes        - Gerar ocorrências recorrentes até uma data
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services.listagem import ler_paginacao, ler_bool
from gestao_juridica.services.receita_service import ReceitaService

logger = logging.getLogger(__name__)

receitas_bp = Blueprint('receitas', __name__)

FILTROS = ('status', 'tipo', 'categoria', 'cliente_id', 'processo_id', 'contrato_id',
           'vencimento_inicio', 'vencimento_fim', 'busca')


@receitas_bp.route('', methods=['GET'])
def listar_receitas():
    """
    Query params:
        status, tipo, categoria, cliente_id, processo_id, contrato_id
        vencimento_inicio, vencimento_fim (AAAA-MM-DD), busca
        recorrente (true/false), incluir_agrupadas (true/false)
        pagina, por_pagina
    """
    try:
        pagina, por_pagina = ler_paginacao(request.args)
        filtros = {campo: request.args.get(campo) for campo in FILTROS}
        filtros['recorrente'] = ler_bool(request.args.get('recorrente'))
        filtros['incluir_agrupadas'] = ler_bool(request.args.get('incluir_agrupadas'))

        resultado = ReceitaService.listar(filtros, pagina, por_pagina)
        return jsonify({
            'success': True,
            'data': [r.to_dict() for r in resultado['itens']],
            'total': resultado['total'],
            'pagina': resultado['pagina'],
            'total_paginas': resultado['total_paginas']
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('/<int:id>', methods=['GET'])
def buscar_receita(id):
    try:
        return jsonify({'success': True, 'data': ReceitaService.detalhar(id)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('', methods=['POST'])
def criar_receita():
    """
    Body params:
        descricao: str (obrigatório)
        valor: float (obrigatório)
        data_vencimento: AAAA-MM-DD (obrigatório)
        tipo: honorario/avulso
        categoria, forma_pagamento, cliente_id, processo_id, contrato_id, observacoes
        parcelado: bool + numero_parcelas: int
        recorrente: bool + config_recorrencia: {frequencia, dia_vencimento, data_fim}
    """
    try:
        receita = ReceitaService.criar(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Receita criada com sucesso',
            'data': ReceitaService.detalhar(receita.id)
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('/<int:id>', methods=['PUT'])
def atualizar_receita(id):
    try:
        receita = ReceitaService.atualizar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Receita atualizada com sucesso',
            'data': receita.to_dict()
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('/<int:id>/cancelar', methods=['POST'])
def cancelar_receita(id):
    try:
        receita = ReceitaService.cancelar(id)
        return jsonify({'success': True, 'message': 'Receita cancelada', 'data': receita.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('/<int:id>/receber', methods=['POST'])
def receber_receita(id):
    """
    Body params:
        conta_bancaria_id: int (obrigatório)
        valor_pago (padrão: valor), data_pagamento (padrão: hoje), forma_pagamento
    """
    try:
        receita = ReceitaService.receber(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Recebimento registrado',
            'data': receita.to_dict()
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('/<int:id>/receber-parcial', methods=['POST'])
def receber_parcial(id):
    """
    Body params:
        valor_pago, nova_data_vencimento, conta_bancaria_id (obrigatórios)
        data_pagamento, forma_pagamento
    """
    try:
        resultado = ReceitaService.receber_parcial(id, request.get_json() or {})
        if resultado.id == id:
            mensagem = 'Valor quitou a receita: recebimento total registrado'
        else:
            mensagem = f'Recebimento parcial registrado; saldo de R$ {float(resultado.valor):.2f} criado'
        return jsonify({'success': True, 'message': mensagem, 'data': resultado.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@receitas_bp.route('/gerar-recorrentes', methods=['POST'])
def gerar_recorrentes():
    """
    Body params:
        ate: AAAA-MM-DD (padrão: hoje)
    """
    try:
        criadas = ReceitaService.gerar_recorrentes((request.get_json(silent=True) or {}).get('ate'))
        return jsonify({
            'success': True,
            'message': f'{len(criadas)} receita(s) gerada(s)',
            'data': [r.to_dict() for r in criadas],
            'total': len(criadas)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)
