"""
Rotas da API para o Extrato financeiro

Endpoints:
- GET    /api/extrato                    - Extrato unificado (filtros, totais, paginação)
- POST   /api/extrato/lote               - Pagar/cancelar/reabrir vários itens
- POST   /api/extrato/atualizar-atrasos  - Marca vencidos como atrasados
"""
import logging

from flask import Blueprint, current_app, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.models import db
from gestao_juridica.services import extrato_service
from gestao_juridica.services.listagem import ler_paginacao

logger = logging.getLogger(__name__)

extrato_bp = Blueprint('extrato', __name__)

FILTROS = ('tipo', 'status', 'conta_bancaria_id', 'periodo', 'preset', 'data_inicio', 'data_fim', 'busca')


@extrato_bp.route('', methods=['GET'])
def extrato():
    """
    Query params:
        tipo: todos, entrada, saida, transferencia
        status, conta_bancaria_id
        periodo: semana, mes, trimestre, todos
        preset: hoje, ultimos_7_dias, ..., este_mes, mes_passado
        data_inicio, data_fim (AAAA-MM-DD), busca
        pagina, por_pagina (padrão: ITENS_POR_PAGINA)
    """
    try:
        pagina, por_pagina = ler_paginacao(request.args, current_app.config['ITENS_POR_PAGINA'])
        filtros = {campo: request.args.get(campo) for campo in FILTROS}
        resultado = extrato_service.montar_extrato(filtros, pagina, por_pagina)
        return jsonify({
            'success': True,
            'data': resultado['itens'],
            'totais': resultado['totais'],
            'total': resultado['total'],
            'pagina': resultado['pagina'],
            'total_paginas': resultado['total_paginas']
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@extrato_bp.route('/lote', methods=['POST'])
def transicionar_em_lote():
    """
    Body params:
        ids: ['receita:12', 'despesa:4', ...]
        acao: pagar, cancelar, reabrir
        conta_bancaria_id: int (obrigatório para pagar)
        data_pagamento, forma_pagamento
    """
    try:
        data = request.get_json() or {}
        resultado = extrato_service.transicionar_em_lote(data.get('ids') or [], data.get('acao'), data)
        db.session.commit()
        return jsonify({
            'success': True,
            'message': f'{len(resultado["processados"])} item(ns) processado(s), '
                       f'{len(resultado["ignorados"])} ignorado(s)',
            'data': resultado
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@extrato_bp.route('/atualizar-atrasos', methods=['POST'])
def atualizar_atrasos():
    try:
        resultado = extrato_service.atualizar_atrasos()
        db.session.commit()
        return jsonify({'success': True, 'data': resultado}), 200
    except Exception as e:
        return resposta_erro(e, logger)
