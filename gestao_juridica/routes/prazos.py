"""
Rotas da API para Prazos processuais e Feriados

Endpoints:
- POST   /api/prazos/calcular            - Calcular data limite (linha do tempo)
- GET    /api/prazos                     - Prazos em aberto com criticidade
- POST   /api/prazos/<tarefa_id>/cumprido - Marcar prazo como cumprido
- GET    /api/prazos/feriados            - Listar feriados (ano, uf)
- POST   /api/prazos/feriados            - Cadastrar feriado
- DELETE /api/prazos/feriados/<id>       - Remover feriado
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.models import db
from gestao_juridica.services import prazo_service

logger = logging.getLogger(__name__)

prazos_bp = Blueprint('prazos', __name__)


@prazos_bp.route('/calcular', methods=['POST'])
def calcular():
    """
    Body params:
        data_intimacao: AAAA-MM-DD (obrigatório)
        quantidade_dias: int (obrigatório)
        dias_uteis: bool (padrão: true)
        uf: inclui feriados estaduais/municipais da UF
    """
    try:
        data = request.get_json() or {}
        resultado = prazo_service.calcular_prazo(
            data.get('data_intimacao'),
            data.get('quantidade_dias'),
            data.get('dias_uteis', True) is not False,
            data.get('uf')
        )
        resultado['data_limite'] = resultado['data_limite'].isoformat()
        resultado['criticidade'] = prazo_service.criticidade(resultado['data_limite'])
        return jsonify({'success': True, 'data': resultado}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@prazos_bp.route('', methods=['GET'])
def listar_prazos():
    """
    Query params:
        criticidade: vencido, hoje, critico, urgente, atencao, normal
        processo_id
    """
    try:
        prazos = prazo_service.listar_prazos(
            nivel=request.args.get('criticidade'),
            processo_id=request.args.get('processo_id', type=int)
        )
        return jsonify({'success': True, 'data': prazos, 'total': len(prazos)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@prazos_bp.route('/<int:tarefa_id>/cumprido', methods=['POST'])
def marcar_cumprido(tarefa_id):
    try:
        tarefa = prazo_service.marcar_prazo_cumprido(tarefa_id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Prazo cumprido', 'data': tarefa.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@prazos_bp.route('/feriados', methods=['GET'])
def listar_feriados():
    try:
        feriados = prazo_service.listar_feriados(request.args.get('ano', type=int), request.args.get('uf'))
        return jsonify({
            'success': True,
            'data': [f.to_dict() for f in feriados],
            'total': len(feriados)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@prazos_bp.route('/feriados', methods=['POST'])
def criar_feriado():
    """
    Body params:
        data, descricao (obrigatórios)
        abrangencia: nacional, estadual, municipal
        uf: obrigatória para estadual/municipal
    """
    try:
        feriado = prazo_service.criar_feriado(request.get_json() or {})
        db.session.commit()
        return jsonify({'success': True, 'message': 'Feriado cadastrado', 'data': feriado.to_dict()}), 201
    except Exception as e:
        return resposta_erro(e, logger)


@prazos_bp.route('/feriados/<int:id>', methods=['DELETE'])
def remover_feriado(id):
    try:
        prazo_service.remover_feriado(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Feriado removido'}), 200
    except Exception as e:
        return resposta_erro(e, logger)
