"""
Aplicação Flask - Gestão Jurídica (back-office do escritório)

Este arquivo inicializa a aplicação Flask e configura rotas, banco de dados,
logs e jobs automáticos
"""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from gestao_juridica.config import get_config
from gestao_juridica.logging_config import setup_logging
from gestao_juridica.models import db

# Carregar variáveis de ambiente
load_dotenv('.env.local')  # Para desenvolvimento

logger = logging.getLogger(__name__)

migrate = Migrate()


def create_app(config_name=None):
    """
    Factory para criar a aplicação Flask

    Args:
        config_name: Nome da configuração ('development', 'production', 'testing')

    Returns:
        app: Instância configurada do Flask
    """
    app = Flask(__name__)

    # Configuração baseada no ambiente
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app.config.from_object(get_config(config_name))
    app.json.ensure_ascii = app.config['JSON_AS_ASCII']
    app.json.sort_keys = app.config['JSON_SORT_KEYS']

    setup_logging(app)
    _preparar_sqlite(app)

    # Inicializar extensões
    db.init_app(app)
    CORS(app)
    migrate.init_app(app, db)

    # Registrar blueprints (rotas)
    register_blueprints(app)

    # Registrar handlers de erro
    register_error_handlers(app)

    @app.route('/health')
    def health():
        """Health check para monitoramento"""
        return jsonify({
            'status': 'ok',
            'environment': config_name,
            'database': 'connected'
        })

    if app.config.get('SCHEDULER_ENABLED'):
        from gestao_juridica.scheduler import start_scheduler
        start_scheduler(app)

    logger.info('Aplicação iniciada (%s)', config_name)
    return app


def _preparar_sqlite(app):
    """Cria o diretório do arquivo SQLite, se for o caso"""
    uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if uri.startswith('sqlite:///') and ':memory:' not in uri:
        Path(uri.replace('sqlite:///', '', 1)).parent.mkdir(parents=True, exist_ok=True)


def register_blueprints(app):
    """
    Registra os blueprints (módulos de rotas)

    Args:
        app: Instância do Flask
    """
    # Importar blueprints aqui para evitar importação circular
    from gestao_juridica.routes.agenda import agenda_bp
    from gestao_juridica.routes.clientes import clientes_bp
    from gestao_juridica.routes.contas_bancarias import contas_bancarias_bp
    from gestao_juridica.routes.contratos import contratos_bp
    from gestao_juridica.routes.dashboard import dashboard_bp
    from gestao_juridica.routes.despesas import despesas_bp
    from gestao_juridica.routes.extrato import extrato_bp
    from gestao_juridica.routes.prazos import prazos_bp
    from gestao_juridica.routes.processos import processos_bp
    from gestao_juridica.routes.receitas import receitas_bp
    from gestao_juridica.routes.recorrencias import recorrencias_bp

    # Registrar blueprints
    app.register_blueprint(clientes_bp, url_prefix='/api/clientes')
    app.register_blueprint(processos_bp, url_prefix='/api/processos')
    app.register_blueprint(contratos_bp, url_prefix='/api/contratos')
    app.register_blueprint(contas_bancarias_bp, url_prefix='/api/contas')
    app.register_blueprint(receitas_bp, url_prefix='/api/receitas')
    app.register_blueprint(despesas_bp, url_prefix='/api/despesas')
    app.register_blueprint(extrato_bp, url_prefix='/api/extrato')
    app.register_blueprint(agenda_bp, url_prefix='/api/agenda')
    app.register_blueprint(recorrencias_bp, url_prefix='/api/recorrencias')
    app.register_blueprint(prazos_bp, url_prefix='/api/prazos')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')


def register_error_handlers(app):
    """
    Registra handlers para tratamento de erros

    Args:
        app: Instância do Flask
    """

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Recurso não encontrado'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        logger.error('Erro interno: %s', error)
        return jsonify({'success': False, 'error': 'Erro interno do servidor'}), 500

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'success': False, 'error': 'Requisição inválida'}), 400

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Método não permitido'}), 405


if __name__ == '__main__':
    app = create_app()

    # Criar tabelas se não existirem
    with app.app_context():
        db.create_all()
        print("=> Tabelas do banco de dados criadas/verificadas com sucesso!")
        print("=> Servidor iniciando em http://localhost:5000")
        print("=> Pressione CTRL+C para parar")

    # Executar servidor
    app.run(
        host='0.0.0.0',
        port=5000,
        debug=app.config.get('DEBUG', False)
    )
