"""
Configuração global de testes pytest

Cada teste roda com um banco SQLite em memória recém-criado.
"""
import os

os.environ.setdefault('FLASK_ENV', 'testing')

import pytest

from gestao_juridica.app import create_app
from gestao_juridica.models import db
from gestao_juridica.services.cliente_service import ClienteService
from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
from gestao_juridica.services.processo_service import ProcessoService

CPF_VALIDO = '529.982.247-25'
CNPJ_VALIDO = '11.222.333/0001-81'
CNJ_VALIDO = '0000001-78.2020.8.26.0100'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def cliente(app):
    return ClienteService.criar({'nome_completo': 'Maria Aparecida Souza', 'cpf_cnpj': CPF_VALIDO})


@pytest.fixture
def outro_cliente(app):
    return ClienteService.criar({'nome_completo': 'Construtora Horizonte Ltda', 'tipo_pessoa': 'pj',
                                 'cpf_cnpj': CNPJ_VALIDO})


@pytest.fixture
def processo(cliente):
    return ProcessoService.criar({'cliente_id': cliente.id, 'area': 'civel',
                                  'parte_contraria': 'Banco Exemplo S.A.'})


@pytest.fixture
def conta(app):
    return ContaBancariaService.criar({'banco': 'Banco do Brasil', 'saldo_inicial': 1000})


@pytest.fixture
def conta_secundaria(app):
    return ContaBancariaService.criar({'banco': 'Caixa do escritório', 'tipo_conta': 'caixa'})
