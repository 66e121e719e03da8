"""
Rotas da API para Recorrências da agenda

Endpoints:
- GET    /api/recorrencias                         - Listar regras (ativo, entidade_tipo)
- GET    /api/recorrencias/<id>                    - Buscar regra (com resumo e próximas datas)
- POST   /api/recorrencias                         - Criar regra
- PUT    /api/recorrencias/<id>                    - Atualizar regra/template
- POST   /api/recorrencias/<id>/desativar          - Desativar
- POST   /api/recorrencias/<id>/ativar             - Reativar
- POST   /api/recorrencias/<id>/excluir-ocorrencia - Excluir 'esta' ocorrência ou 'todas' as futuras
- POST   /api/recorrencias/processar               - Materializar a janela de antecedência agora
"""
import logging
from datetime import date, timedelta

from flask import Blueprint, current_app, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.models import db
from gestao_juridica.services import recorrencia_service
from gestao_juridica.services.listagem import ler_bool

logger = logging.getLogger(__name__)

recorrencias_bp = Blueprint('recorrencias', __name__)


def _serializar(regra, proximas=0):
    dados = regra.to_dict()
    dados['resumo'] = recorrencia_service.resumo(regra)
    if proximas:
        hoje = date.today()
        inicio = max(hoje, regra.data_inicio)
        datas = recorrencia_service.calcular_datas(regra, inicio, inicio + timedelta(days=400))
        excluidas = regra.datas_excluidas()
        dados['proximas_datas'] = [d.isoformat() for d in datas if d not in excluidas][:proximas]
    return dados


@recorrencias_bp.route('', methods=['GET'])
def listar_recorrencias():
    try:
        regras = recorrencia_service.listar_recorrencias(
            ativo=ler_bool(request.args.get('ativo')),
            entidade_tipo=request.args.get('entidade_tipo')
        )
        return jsonify({
            'success': True,
            'data': [_serializar(r) for r in regras],
            'total': len(regras)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('/<int:id>', methods=['GET'])
def buscar_recorrencia(id):
    try:
        regra = recorrencia_service.obter_recorrencia(id)
        return jsonify({'success': True, 'data': _serializar(regra, proximas=10)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('', methods=['POST'])
def criar_recorrencia():
    """
    Body params:
        template_nome: str (obrigatório)
        entidade_tipo: tarefa, evento, audiencia (obrigatório)
        template_dados: dict (campos copiados para cada ocorrência; duracao_minutos)
        regra_frequencia: diaria, semanal, mensal, anual (obrigatório)
        regra_intervalo, regra_dias_semana (0=domingo), regra_dia_mes (99 = último dia),
        regra_mes, regra_hora (HH:MM), regra_apenas_uteis
        data_inicio (obrigatório), data_fim, max_ocorrencias
    """
    try:
        regra = recorrencia_service.criar_recorrencia(request.get_json() or {})
        db.session.commit()
        return jsonify({
            'success': True,
            'message': 'Recorrência criada com sucesso',
            'data': _serializar(regra, proximas=10)
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('/<int:id>', methods=['PUT'])
def atualizar_recorrencia(id):
    try:
        regra = recorrencia_service.atualizar_recorrencia(id, request.get_json() or {})
        db.session.commit()
        return jsonify({
            'success': True,
            'message': 'Recorrência atualizada com sucesso',
            'data': _serializar(regra, proximas=10)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('/<int:id>/desativar', methods=['POST'])
def desativar_recorrencia(id):
    try:
        regra = recorrencia_service.desativar_recorrencia(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Recorrência desativada', 'data': _serializar(regra)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('/<int:id>/ativar', methods=['POST'])
def ativar_recorrencia(id):
    try:
        regra = recorrencia_service.ativar_recorrencia(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Recorrência ativada', 'data': _serializar(regra)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('/<int:id>/excluir-ocorrencia', methods=['POST'])
def excluir_ocorrencia(id):
    """
    Body params:
        escopo: esta, todas
        data: AAAA-MM-DD (obrigatório para 'esta')
    """
    try:
        data = request.get_json() or {}
        resultado = recorrencia_service.excluir_ocorrencia(id, data.get('data'), data.get('escopo', 'esta'))
        db.session.commit()
        return jsonify({'success': True, 'data': resultado}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@recorrencias_bp.route('/processar', methods=['POST'])
def processar():
    try:
        resultado = recorrencia_service.processar_janela(
            janela_dias=current_app.config['JANELA_RECORRENCIA_DIAS'])
        return jsonify({'success': True, 'data': resultado}), 200
    except Exception as e:
        return resposta_erro(e, logger)
