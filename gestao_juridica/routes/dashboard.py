"""
Rotas da API para Dashboard - Dados Consolidados

Endpoints:
- GET /api/dashboard/resumo-financeiro  - Resumo financeiro do mês (?mes=AAAA-MM)
- GET /api/dashboard/agenda-do-dia      - Itens de hoje ordenados e prazos urgentes
- GET /api/dashboard/processos          - Processos por status e críticos
- GET /api/dashboard/contratos          - Métricas da carteira de contratos
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services import dashboard_service
from gestao_juridica.services.contrato_service import ContratoService

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)


# ============================================================================
# BLOCO 1: RESUMO FINANCEIRO DO MÊS
# ============================================================================

@dashboard_bp.route('/resumo-financeiro', methods=['GET'])
def resumo_financeiro():
    try:
        return jsonify({
            'success': True,
            'data': dashboard_service.resumo_financeiro(request.args.get('mes'))
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


# ============================================================================
# BLOCO 2: AGENDA DO DIA
# ============================================================================

@dashboard_bp.route('/agenda-do-dia', methods=['GET'])
def agenda_do_dia():
    try:
        return jsonify({'success': True, 'data': dashboard_service.agenda_do_dia()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


# ============================================================================
# BLOCO 3: PROCESSOS E CONTRATOS
# ============================================================================

@dashboard_bp.route('/processos', methods=['GET'])
def processos():
    try:
        return jsonify({'success': True, 'data': dashboard_service.processos_resumo()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@dashboard_bp.route('/contratos', methods=['GET'])
def contratos():
    try:
        return jsonify({'success': True, 'data': ContratoService.metricas()}), 200
    except Exception as e:
        return resposta_erro(e, logger)
