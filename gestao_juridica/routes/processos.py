"""
Rotas da API para Processos

Endpoints:
- GET    /api/processos                      - Listar (visao, busca, filtros, ordenação, paginação)
- GET    /api/processos/contadores           - Quantidade por visão
- GET    /api/processos/proximo-numero       - Próximo número de pasta
- GET    /api/processos/<id>                 - Detalhe com cliente, contrato e próximos itens da agenda
- POST   /api/processos                      - Criar processo
- PUT    /api/processos/<id>                 - Atualizar processo
- PUT    /api/processos/lote                 - Edição em lote (status, fase, area, responsavel)
- GET    /api/processos/<id>/pendencias      - Tarefas e audiências em aberto (antes de encerrar)
- POST   /api/processos/<id>/encerrar        - Encerrar processo
"""
import logging

from flask import Blueprint, request, jsonify

from gestao_juridica.errors import resposta_erro
from gestao_juridica.services import agenda_service, prazo_service
from gestao_juridica.services.listagem import ler_paginacao
from gestao_juridica.services.processo_service import ProcessoService, STATUS_ENCERRADOS, DIAS_PRAZO_CRITICO

logger = logging.getLogger(__name__)

processos_bp = Blueprint('processos', __name__)


@processos_bp.route('', methods=['GET'])
def listar_processos():
    """
    Query params:
        visao: todos, ativos, criticos, arquivados (padrão: ativos)
        busca: pasta, CNJ, parte contrária ou nome do cliente
        area, fase, status, cliente_id, responsavel
        ordenar_por, direcao (asc/desc), pagina, por_pagina
    """
    try:
        pagina, por_pagina = ler_paginacao(request.args)
        filtros = {campo: request.args.get(campo)
                   for campo in ('area', 'fase', 'status', 'cliente_id', 'responsavel')}
        resultado = ProcessoService.listar(
            visao=request.args.get('visao', 'ativos'),
            busca=request.args.get('busca'),
            filtros=filtros,
            ordenar_por=request.args.get('ordenar_por'),
            direcao=request.args.get('direcao', 'desc'),
            pagina=pagina,
            por_pagina=por_pagina
        )
        return jsonify({
            'success': True,
            'data': resultado['itens'],
            'total': resultado['total'],
            'pagina': resultado['pagina'],
            'total_paginas': resultado['total_paginas']
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/contadores', methods=['GET'])
def contadores():
    try:
        return jsonify({'success': True, 'data': ProcessoService.contadores()}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/proximo-numero', methods=['GET'])
def proximo_numero():
    try:
        return jsonify({'success': True, 'data': {'numero_pasta': ProcessoService.proximo_numero_pasta()}}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/<int:id>', methods=['GET'])
def buscar_processo(id):
    try:
        processo = ProcessoService.obter(id)
        prazos = prazo_service.listar_prazos(processo_id=id)
        critico = processo.status not in STATUS_ENCERRADOS and any(
            0 <= p['dias_restantes'] <= DIAS_PRAZO_CRITICO for p in prazos)
        dados = ProcessoService.serializar(processo, {id} if critico else ())
        dados['cliente'] = processo.cliente.to_dict() if processo.cliente else None
        dados['contrato'] = processo.contrato.to_dict() if processo.contrato else None
        dados['proximos_itens'] = agenda_service.proximos_itens_processo(id)
        dados['prazos'] = prazos
        return jsonify({'success': True, 'data': dados}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('', methods=['POST'])
def criar_processo():
    """
    Body params:
        cliente_id: int (obrigatório)
        numero_cnj, contrato_id, parte_contraria, area, fase, instancia, rito,
        polo_cliente, tipo, provisao_perda, valor_causa, responsavel,
        tribunal, comarca, vara, data_distribuicao
    """
    try:
        processo = ProcessoService.criar(request.get_json() or {})
        return jsonify({
            'success': True,
            'message': f'Processo {processo.numero_pasta} criado com sucesso',
            'data': ProcessoService.serializar(processo)
        }), 201
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/<int:id>', methods=['PUT'])
def atualizar_processo(id):
    try:
        processo = ProcessoService.atualizar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Processo atualizado com sucesso',
            'data': ProcessoService.serializar(processo)
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/lote', methods=['PUT'])
def editar_em_lote():
    """
    Body params:
        ids: list[int]
        campos: {status?, fase?, area?, responsavel?}
    """
    try:
        data = request.get_json() or {}
        total = ProcessoService.editar_em_lote(data.get('ids') or [], data.get('campos') or {})
        return jsonify({
            'success': True,
            'message': f'{total} processo(s) atualizado(s)',
            'total': total
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/<int:id>/pendencias', methods=['GET'])
def pendencias(id):
    try:
        return jsonify({'success': True, 'data': ProcessoService.pendencias_encerramento(id)}), 200
    except Exception as e:
        return resposta_erro(e, logger)


@processos_bp.route('/<int:id>/encerrar', methods=['POST'])
def encerrar_processo(id):
    """
    Body params:
        houve_acordo, transitou_julgado: bool
        resultado, valor_acordo, valor_condenacao, data_encerramento,
        data_transito_julgado, resumo_encerramento
        cancelar_tarefas_ids, cancelar_audiencias_ids: list[int]
    """
    try:
        resultado = ProcessoService.encerrar(id, request.get_json() or {})
        return jsonify({
            'success': True,
            'message': 'Processo encerrado com sucesso',
            'data': {
                'processo': ProcessoService.serializar(resultado['processo']),
                'tarefas_canceladas': resultado['tarefas_canceladas'],
                'audiencias_canceladas': resultado['audiencias_canceladas']
            }
        }), 200
    except Exception as e:
        return resposta_erro(e, logger)
