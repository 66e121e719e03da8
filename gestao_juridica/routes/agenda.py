"""
Rotas da API para a Agenda (tarefas, eventos e audiências)

Endpoints:
- GET    /api/agenda/itens                              - Calendário consolidado agrupado por dia
- POST   /api/agenda/mover                              - Mover item (arrastar e soltar)

- GET    /api/agenda/tarefas/<id>                       - Buscar tarefa
- POST   /api/agenda/tarefas                            - Criar tarefa (calcula prazo fatal)
- PUT    /api/agenda/tarefas/<id>                       - Atualizar tarefa
- DELETE /api/agenda/tarefas/<id>                       - Excluir tarefa
- POST   /api/agenda/tarefas/<id>/concluir              - Concluir tarefa
- PUT    /api/agenda/tarefas/<id>/prazo-fatal           - Alterar prazo fatal (exige confirmar=true)
- POST   /api/agenda/tarefas/<id>/checklist             - Adicionar item ao checklist
- PUT    /api/agenda/tarefas/<id>/checklist/<item_id>   - Marcar/desmarcar item
- DELETE /api/agenda/tarefas/<id>/checklist/<item_id>   - Remover item

- GET    /api/agenda/eventos/<id>                       - Buscar compromisso
- POST   /api/agenda/eventos                            - Criar compromisso
- PUT    /api/agenda/eventos/<id>                       - Atualizar compromisso
- DELETE /api/agenda/eventos/<id>                       - Excluir compromisso
  (a listagem de compromissos é feita por /api/agenda/itens?tipo_entidade=evento)

- GET    /api/agenda/audiencias                         - Listar audiências
- GET    /api/agenda/audiencias/<id>                    - Buscar audiência
- POST   /api/agenda/audiencias                         - Criar audiência
- PUT    /api/agenda/audiencias/<id>                    - Atualizar audiência
- DELETE /api/agenda/audiencias/<id>                    - Excluir audiência
- POST   /api/agenda/audiencias/<id>/resultado          - Registrar resultado da audiência

Mover uma tarefa para depois do prazo fatal responde 409 com o prazo
sugerido; a chamada deve ser repetida com novo_prazo_fatal.
"""
import logging
from datetime import date

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.models import db
from gestao_juridica.services import agenda_service
from gestao_juridica.services.listagem import ler_bool
from gestao_juridica.services.periodos import parse_date

logger = logging.getLogger(__name__)

agenda_bp = Blueprint('agenda', __name__)

SERIALIZADORES = {
    'tarefa': agenda_service.item_tarefa,
    'evento': agenda_service.item_evento,
    'audiencia': agenda_service.item_audiencia,
}


# ============================================================================
# CALENDÁRIO CONSOLIDADO
# ============================================================================

@agenda_bp.route('/itens', methods=['GET'])
def listar_itens():
    """
    Query params:
        inicio, fim: AAAA-MM-DD (obrigatórios)
        tipo_entidade: tarefa,evento,audiencia
        status, prioridade, responsavel, processo_id
        passado: true ordena os dias do mais recente para o mais antigo
        virtuais: false oculta ocorrências ainda não materializadas
    """
    try:
        filtros = {campo: request.args.get(campo)
                   for campo in ('tipo_entidade', 'status', 'prioridade', 'responsavel', 'processo_id')}
        virtuais = ler_bool(request.args.get('virtuais'))
        itens = agenda_service.listar_itens(
            request.args.get('inicio'),
            request.args.get('fim'),
            filtros,
            incluir_virtuais=virtuais is not False
        )
        dias = agenda_service.agrupar_por_dia(itens, date.today(), bool(ler_bool(request.args.get('passado'))))
        return jsonify({'success': True, 'data': dias, 'total': len(itens)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/mover', methods=['POST'])
def mover_item():
    """
    Body params:
        id: 'tarefa:5', 'evento:2', 'audiencia:7' ou 'virtual:<regra>:<data>'
            (ou tipo + entidade_id)
        nova_data: AAAA-MM-DD (obrigatório)
        novo_horario: HH:MM
        novo_prazo_fatal: AAAA-MM-DD (confirma mover tarefa para depois do prazo)
    """
    try:
        data = request.get_json() or {}
        identificador = data.get('id') or f'{data.get("tipo")}:{data.get("entidade_id")}'
        tipo, entidade = agenda_service.mover_item(
            identificador,
            data.get('nova_data'),
            data.get('novo_horario'),
            data.get('novo_prazo_fatal')
        )
        db.session.commit()
        return jsonify({
            'success': True,
            'message': 'Item movido com sucesso',
            'data': SERIALIZADORES[tipo](entidade)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


# ============================================================================
# TAREFAS
# ============================================================================

@agenda_bp.route('/tarefas/<int:id>', methods=['GET'])
def buscar_tarefa(id):
    try:
        return jsonify({'success': True, 'data': agenda_service.obter_tarefa(id).to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas', methods=['POST'])
def criar_tarefa():
    """
    Body params:
        titulo: str (obrigatório)
        data_inicio: AAAA-MM-DD (padrão: prazo fatal)
        tipo, prioridade, status, horario_planejado_dia, duracao_planejada_minutos,
        responsavel, processo_id, cor, checklist: list[str]
        prazo_data_intimacao, prazo_quantidade_dias, prazo_dias_uteis, prazo_tipo, uf
        prazo_data_limite: informado diretamente em vez de calculado
    """
    try:
        tarefa = agenda_service.criar_tarefa(request.get_json() or {})
        db.session.commit()
        return jsonify({
            'success': True,
            'message': 'Tarefa criada com sucesso',
            'data': tarefa.to_dict()
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>', methods=['PUT'])
def atualizar_tarefa(id):
    try:
        tarefa = agenda_service.atualizar_tarefa(id, request.get_json() or {})
        db.session.commit()
        return jsonify({
            'success': True,
            'message': 'Tarefa atualizada com sucesso',
            'data': tarefa.to_dict()
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>', methods=['DELETE'])
def excluir_tarefa(id):
    try:
        agenda_service.excluir_tarefa(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Tarefa excluída'}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>/concluir', methods=['POST'])
def concluir_tarefa(id):
    try:
        tarefa = agenda_service.concluir_tarefa(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Tarefa concluída', 'data': tarefa.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>/prazo-fatal', methods=['PUT'])
def alterar_prazo_fatal(id):
    """
    Body params:
        prazo_data_limite: AAAA-MM-DD (vazio remove o prazo)
        confirmar: bool (sem confirmação responde 409)
    """
    try:
        data = request.get_json() or {}
        tarefa = agenda_service.alterar_prazo_fatal(id, data.get('prazo_data_limite'),
                                                    bool(data.get('confirmar')))
        db.session.commit()
        return jsonify({'success': True, 'message': 'Prazo fatal alterado', 'data': tarefa.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>/checklist', methods=['POST'])
def adicionar_item_checklist(id):
    try:
        item = agenda_service.adicionar_item_checklist(id, (request.get_json() or {}).get('item'))
        db.session.commit()
        return jsonify({'success': True, 'data': item.to_dict()}), 201
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>/checklist/<int:item_id>', methods=['PUT'])
def alternar_item_checklist(id, item_id):
    try:
        item = agenda_service.alternar_item_checklist(id, item_id)
        db.session.commit()
        return jsonify({'success': True, 'data': item.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/tarefas/<int:id>/checklist/<int:item_id>', methods=['DELETE'])
def remover_item_checklist(id, item_id):
    try:
        agenda_service.remover_item_checklist(id, item_id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Item removido'}), 200
    except Exception as e:
        return resposta_erro(e, logger)


# ============================================================================
# EVENTOS
# ============================================================================

@agenda_bp.route('/eventos/<int:id>', methods=['GET'])
def buscar_evento(id):
    try:
        return jsonify({'success': True, 'data': agenda_service.obter_evento(id).to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/eventos', methods=['POST'])
def criar_evento():
    """
    Body params:
        titulo, data_inicio (obrigatórios)
        data_fim, dia_inteiro, local, status, responsavel, processo_id, cor
    """
    try:
        evento = agenda_service.criar_evento(request.get_json() or {})
        db.session.commit()
        return jsonify({'success': True, 'message': 'Compromisso criado', 'data': evento.to_dict()}), 201
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/eventos/<int:id>', methods=['PUT'])
def atualizar_evento(id):
    try:
        evento = agenda_service.atualizar_evento(id, request.get_json() or {})
        db.session.commit()
        return jsonify({'success': True, 'message': 'Compromisso atualizado', 'data': evento.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/eventos/<int:id>', methods=['DELETE'])
def excluir_evento(id):
    try:
        agenda_service.excluir_evento(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Compromisso excluído'}), 200
    except Exception as e:
        return resposta_erro(e, logger)


# ============================================================================
# AUDIÊNCIAS
# ============================================================================

@agenda_bp.route('/audiencias', methods=['GET'])
def listar_audiencias():
    """
    Query params:
        inicio, fim: AAAA-MM-DD (padrão: de hoje em diante)
        processo_id, status
    """
    try:
        inicio = parse_date(request.args.get('inicio')) or date.today()
        fim = parse_date(request.args.get('fim')) or date(inicio.year + 1, inicio.month, 1)
        filtros = {'tipo_entidade': 'audiencia',
                   'processo_id': request.args.get('processo_id'),
                   'status': request.args.get('status')}
        itens = agenda_service.listar_itens(inicio, fim, filtros, incluir_virtuais=False)
        itens.sort(key=lambda item: item['data_inicio'])
        return jsonify({'success': True, 'data': itens, 'total': len(itens)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/audiencias/<int:id>', methods=['GET'])
def buscar_audiencia(id):
    try:
        return jsonify({'success': True, 'data': agenda_service.obter_audiencia(id).to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/audiencias', methods=['POST'])
def criar_audiencia():
    """
    Body params:
        processo_id, data_hora (obrigatórios)
        titulo, tipo_audiencia, modalidade, duracao_minutos, tribunal, comarca, vara,
        forum, sala, link_virtual, juiz, responsavel, observacoes
    """
    try:
        audiencia = agenda_service.criar_audiencia(request.get_json() or {})
        db.session.commit()
        return jsonify({'success': True, 'message': 'Audiência agendada', 'data': audiencia.to_dict()}), 201
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/audiencias/<int:id>', methods=['PUT'])
def atualizar_audiencia(id):
    try:
        audiencia = agenda_service.atualizar_audiencia(id, request.get_json() or {})
        db.session.commit()
        return jsonify({'success': True, 'message': 'Audiência atualizada', 'data': audiencia.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/audiencias/<int:id>/resultado', methods=['POST'])
def registrar_resultado(id):
    """
    Body params:
        resultado_tipo: str (obrigatório)
        resultado_descricao: str
    """
    try:
        data = request.get_json() or {}
        audiencia = agenda_service.registrar_resultado_audiencia(id, data.get('resultado_tipo'),
                                                                 data.get('resultado_descricao'))
        db.session.commit()
        return jsonify({'success': True, 'message': 'Resultado registrado', 'data': audiencia.to_dict()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@agenda_bp.route('/audiencias/<int:id>', methods=['DELETE'])
def excluir_audiencia(id):
    try:
        agenda_service.excluir_audiencia(id)
        db.session.commit()
        return jsonify({'success': True, 'message': 'Audiência excluída'}), 200
    except Exception as e:
        return resposta_erro(e, logger)
