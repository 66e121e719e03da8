"""
Script para inicializar o banco de dados

Executa:
- Criação das tabelas
- Cadastro dos feriados nacionais do ano, fixos e móveis (usados no cálculo de prazos)
- Opcionalmente popula com dados de exemplo

Uso: python init_db.py [--exemplo] [--ano 2026]
"""
import argparse
from datetime import date, timedelta

from gestao_juridica.app import create_app
from gestao_juridica.models import db
from gestao_juridica.services import prazo_service


def init_database(with_sample_data=False, ano=None):
    """
    Inicializa o banco de dados

    Args:
        with_sample_data: Se True, popula com dados de exemplo
        ano: Ano dos feriados nacionais (padrão: ano atual)
    """
    app = create_app('development')

    with app.app_context():
        print("=> Criando tabelas do banco de dados...")
        db.create_all()
        print("=> Tabelas criadas com sucesso!")

        criados = prazo_service.cadastrar_feriados_nacionais(ano or date.today().year)
        db.session.commit()
        print(f"=> {criados} feriado(s) nacional(is) cadastrado(s)")

        if with_sample_data:
            print("\n=> Populando banco com dados de exemplo...")
            populate_sample_data()
            print("=> Dados de exemplo inseridos com sucesso!")

        print(f"\n=> Banco de dados: {app.config['SQLALCHEMY_DATABASE_URI']}")
        print("\n=> Para iniciar o servidor, execute: python -m gestao_juridica.app")


def populate_sample_data():
    """Popula o banco com dados de exemplo para testes manuais"""
    from gestao_juridica.services import agenda_service
    from gestao_juridica.services.cliente_service import ClienteService
    from gestao_juridica.services.conta_bancaria_service import ContaBancariaService
    from gestao_juridica.services.contrato_service import ContratoService
    from gestao_juridica.services.processo_service import ProcessoService
    from gestao_juridica.services.receita_service import ReceitaService

    hoje = date.today()

    conta = ContaBancariaService.criar({'banco': 'Banco do Brasil', 'agencia': '1234', 'numero_conta': '56789-0',
                                        'saldo_inicial': 5000, 'conta_principal': True})
    ContaBancariaService.criar({'banco': 'Caixa do escritório', 'tipo_conta': 'caixa'})

    cliente = ClienteService.criar({'nome_completo': 'Maria Aparecida Souza', 'tipo_pessoa': 'pf',
                                    'cpf_cnpj': '529.982.247-25', 'email': 'maria@example.com'})
    contrato = ContratoService.criar({'cliente_id': cliente.id, 'titulo': 'Ação de cobrança',
                                      'forma_cobranca': 'fixo', 'valor_fixo': 6000})
    processo = ProcessoService.criar({'cliente_id': cliente.id, 'contrato_id': contrato.id,
                                      'numero_cnj': '0000001-78.2020.8.26.0100', 'area': 'civel',
                                      'parte_contraria': 'Empresa XYZ Ltda', 'responsavel': 'Dra. Ana'})

    receita = ReceitaService.criar({'descricao': 'Honorários contratuais', 'valor': 6000,
                                    'data_vencimento': hoje.isoformat(), 'contrato_id': contrato.id,
                                    'parcelado': True, 'numero_parcelas': 3})
    primeira = receita.parcelas.first()
    ReceitaService.receber(primeira.id, {'conta_bancaria_id': conta.id})

    agenda_service.criar_tarefa({'titulo': 'Contestação', 'tipo': 'prazo_processual', 'prioridade': 'alta',
                                 'processo_id': processo.id,
                                 'prazo_data_intimacao': (hoje - timedelta(days=3)).isoformat(),
                                 'prazo_quantidade_dias': 15})
    agenda_service.criar_audiencia({'processo_id': processo.id, 'tipo_audiencia': 'conciliacao',
                                    'data_hora': f'{(hoje + timedelta(days=20)).isoformat()}T14:00'})
    db.session.commit()


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Inicializa o banco de dados')
    parser.add_argument('--exemplo', action='store_true', help='Popula com dados de exemplo')
    parser.add_argument('--ano', type=int, help='Ano dos feriados nacionais')
    args = parser.parse_args()

    init_database(with_sample_data=args.exemplo, ano=args.ano)
