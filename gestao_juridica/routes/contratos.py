"""
Rotas da API para Contratos de Honorários

Endpoints:
- GET    /api/contratos                              - Listar com resumo financeiro
- GET    /api/contratos/metricas                     - Métricas da carteira
- GET    /api/contratos/<id>                         - Detalhe (resumo financeiro + processos)
- POST   /api/contratos                              - Criar contrato (numeração CONT-0001)
- PUT    /api/contratos/<id>                         - Atualizar contrato
- DELETE /api/contratos/<id>                         - Inativar contrato
- POST   /api/contratos/<id>/processos/<processo_id> - Vincular processo
- DELETE /api/contratos/<id>/processos/<processo_id> - Desvincular processo
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services.contrato_service import ContratoService
from gestao_juridica.services.listagem import ler_bool

logger = logging.getLogger(__name__)

contratos_bp = Blueprint('contratos', __name__)


@contratos_bp.route('', methods=['GET'])
def listar_contratos():
    """
    Query params:
        cliente_id, ativo (true/false), forma_cobranca, inadimplente (true/false)
    """
    try:
        contratos = ContratoService.listar(
            cliente_id=request.args.get('cliente_id', type=int),
            ativo=ler_bool(request.args.get('ativo')),
            forma_cobranca=request.args.get('forma_cobranca'),
            inadimplente=ler_bool(request.args.get('inadimplente'))
        )
        return jsonify({'success': True, 'data': contratos, 'total': len(contratos)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('/metricas', methods=['GET'])
def metricas():
    try:
        return jsonify({'success': True, 'data': ContratoService.metricas()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('/<int:id>', methods=['GET'])
def buscar_contrato(id):
    try:
        contrato = ContratoService.obter(id)
        dados = ContratoService.serializar(contrato)
        dados['processos'] = [p.to_dict() for p in contrato.processos]
        return jsonify({'success': True, 'data': dados}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('', methods=['POST'])
def criar_contrato():
    """
    Body params:
        cliente_id: int (obrigatório)
        titulo: str (obrigatório)
        forma_cobranca: fixo, por_hora, por_etapa, misto, por_pasta, por_ato, por_cargo, pro_bono
        tipo_servico, valor_fixo, valor_hora, horas_estimadas, percentual_exito,
        valor_minimo_exito, valor_por_processo, dia_cobranca, data_inicio, data_fim
    """
    try:
        contrato = ContratoService.criar(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': f'Contrato {contrato.numero_contrato} criado com sucesso',
            'data': ContratoService.serializar(contrato)
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('/<int:id>', methods=['PUT'])
def atualizar_contrato(id):
    try:
        contrato = ContratoService.atualizar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Contrato atualizado com sucesso',
            'data': ContratoService.serializar(contrato)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('/<int:id>', methods=['DELETE'])
def inativar_contrato(id):
    try:
        ContratoService.inativar(id)
        return jsonify({'success': True, 'message': 'Contrato inativado com sucesso'}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('/<int:id>/processos/<int:processo_id>', methods=['POST'])
def vincular_processo(id, processo_id):
    try:
        processo = ContratoService.vincular_processo(id, processo_id)
        return jsonify({'success': True, 'message': 'Processo vinculado', 'data': processo.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@contratos_bp.route('/<int:id>/processos/<int:processo_id>', methods=['DELETE'])
def desvincular_processo(id, processo_id):
    try:
        ContratoService.desvincular_processo(id, processo_id)
        return jsonify({'success': True, 'message': 'Processo desvinculado'}), 200
    except Exception as e:
        return resposta_erro(e, logger)
