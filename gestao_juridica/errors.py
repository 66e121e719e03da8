"""
Exceções de negócio e respostas de erro padronizadas da API

Convenção das rotas:
- ValueError               -> 400 (validação)
- RegistroNaoEncontrado    -> 404
- ConfirmacaoNecessaria    -> 409 (operação exige confirmação explícita do usuário)
- Exception                -> 500 (rollback + log)
"""
import logging

from flask import jsonify

from gestao_juridica.models import db


class RegistroNaoEncontrado(ValueError):
    """Registro inexistente (vira 404 nas rotas)"""


class ConfirmacaoNecessaria(Exception):
    """
    A operação só pode prosseguir após confirmação do usuário.

    `detalhes` descreve o que precisa ser confirmado (ex.: novo prazo fatal
    sugerido ao mover uma tarefa para depois do prazo atual).
    """

    def __init__(self, mensagem, detalhes=None):
        super().__init__(mensagem)
        self.detalhes = detalhes or {}


def resposta_erro(erro, logger=None):
    """
    Converte uma exceção na resposta JSON padrão

    Args:
        erro: Exceção capturada na rota
        logger: Logger do módulo chamador (para erros inesperados)

    Returns:
        tuple: (Response, status_code)
    """
    if isinstance(erro, ConfirmacaoNecessaria):
        db.session.rollback()
        return jsonify({
            'success': False,
            'error': str(erro),
            'requer_confirmacao': True,
            'detalhes': erro.detalhes
        }), 409

    if isinstance(erro, RegistroNaoEncontrado):
        db.session.rollback()
        return jsonify({'success': False, 'error': str(erro)}), 404

    if isinstance(erro, ValueError):
        db.session.rollback()
        return jsonify({'success': False, 'error': str(erro)}), 400

    db.session.rollback()
    (logger or logging.getLogger(__name__)).exception('Erro inesperado: %s', erro)
    return jsonify({'success': False, 'error': str(erro)}), 500
