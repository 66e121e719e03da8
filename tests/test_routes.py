from datetime import date, timedelta

CPF_VALIDO = '529.982.247-25'


def _criar_cliente(client):
    resp = client.post('/api/clientes', json={'nome_completo': 'João da Silva', 'cpf_cnpj': CPF_VALIDO})
    assert resp.status_code == 201
    return resp.get_json()['data']


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json()['environment'] == 'testing'


def test_erros_padronizados(client):
    resp = client.get('/api/nao-existe')
    assert resp.status_code == 404
    assert resp.get_json()['success'] is False

    assert client.delete('/api/extrato').status_code == 405
    assert client.get('/api/clientes/999').status_code == 404

    resp = client.post('/api/clientes', json={'nome_completo': 'Fulano', 'cpf_cnpj': '123.456.789-00'})
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'error': 'CPF inválido'}


def test_clientes(client):
    cliente = _criar_cliente(client)
    assert cliente['cpf_cnpj'] == '52998224725'

    resp = client.get('/api/clientes', query_string={'busca': '529.982'})
    assert resp.get_json()['total'] == 1

    assert client.post('/api/clientes', json={'nome_completo': 'Outro', 'cpf_cnpj': CPF_VALIDO}).status_code == 400

    assert client.delete(f'/api/clientes/{cliente["id"]}').status_code == 200
    assert client.get('/api/clientes').get_json()['total'] == 0
    assert client.get('/api/clientes', query_string={'ativo': 'false'}).get_json()['total'] == 1


def test_processo_detalhado(client):
    cliente = _criar_cliente(client)
    resp = client.post('/api/processos', json={'cliente_id': cliente['id'], 'area': 'civel'})
    assert resp.status_code == 201
    processo = resp.get_json()['data']

    hoje = date.today()
    client.post('/api/agenda/tarefas', json={'titulo': 'Réplica', 'processo_id': processo['id'],
                                             'data_inicio': hoje.isoformat(),
                                             'prazo_data_limite': (hoje + timedelta(days=2)).isoformat()})

    detalhe = client.get(f'/api/processos/{processo["id"]}').get_json()['data']
    assert detalhe['cliente']['id'] == cliente['id']
    assert detalhe['tem_prazo_critico'] is True
    assert [i['titulo'] for i in detalhe['proximos_itens']] == ['Réplica']

    contadores = client.get('/api/processos/contadores').get_json()['data']
    assert contadores['criticos'] == 1


def test_mover_alem_do_prazo_pede_confirmacao(client):
    resp = client.post('/api/agenda/tarefas', json={'titulo': 'Apelação', 'data_inicio': '2024-05-06',
                                                    'prazo_data_limite': '2024-05-10'})
    tarefa = resp.get_json()['data']

    resp = client.post('/api/agenda/mover', json={'id': f'tarefa:{tarefa["id"]}', 'nova_data': '2024-05-13'})
    assert resp.status_code == 409
    corpo = resp.get_json()
    assert corpo['requer_confirmacao'] is True
    assert corpo['detalhes']['novo_prazo_fatal_sugerido'] == '2024-05-17'

    resp = client.post('/api/agenda/mover', json={'tipo': 'tarefa', 'entidade_id': tarefa['id'],
                                                  'nova_data': '2024-05-13', 'novo_prazo_fatal': '2024-05-17'})
    assert resp.status_code == 200
    assert resp.get_json()['data']['prazo_data_limite'] == '2024-05-17'

    itens = client.get('/api/agenda/itens', query_string={'inicio': '2024-05-13', 'fim': '2024-05-13'})
    assert itens.get_json()['data'][0]['itens'][0]['entidade_id'] == tarefa['id']

    assert client.get('/api/agenda/itens').status_code == 400


def test_calcular_prazo(client):
    client.post('/api/prazos/feriados', json={'data': '2024-05-08', 'descricao': 'Feriado'})
    resp = client.post('/api/prazos/calcular', json={'data_intimacao': '2024-05-03', 'quantidade_dias': 5})
    assert resp.status_code == 200
    assert resp.get_json()['data']['data_limite'] == '2024-05-13'
    assert resp.get_json()['data']['criticidade'] == 'vencido'

    assert client.post('/api/prazos/calcular', json={'quantidade_dias': 5}).status_code == 400


def test_financeiro_e_extrato(client):
    conta = client.post('/api/contas', json={'banco': 'Itaú', 'saldo_inicial': 100}).get_json()['data']
    receita = client.post('/api/receitas', json={'descricao': 'Consulta', 'valor': 250,
                                                 'data_vencimento': '2024-05-01'}).get_json()['data']

    resp = client.post('/api/extrato/lote', json={'ids': [f'receita:{receita["id"]}'], 'acao': 'pagar',
                                                  'conta_bancaria_id': conta['id']})
    assert resp.status_code == 200
    assert resp.get_json()['data']['processados'] == [f'receita:{receita["id"]}']

    extrato = client.get('/api/extrato').get_json()
    assert extrato['total'] == 1
    assert extrato['totais']['total_entradas'] == 250.0

    saldo = client.get('/api/contas/saldo-total').get_json()['data']['saldo_total']
    assert saldo == 350.0

    assert client.post('/api/extrato/lote', json={'acao': 'pagar'}).status_code == 400
    assert client.get('/api/extrato', query_string={'preset': 'amanha'}).status_code == 400


def test_dashboard(client):
    for caminho in ('resumo-financeiro', 'agenda-do-dia', 'processos', 'contratos'):
        resp = client.get(f'/api/dashboard/{caminho}')
        assert resp.status_code == 200, caminho
        assert resp.get_json()['success'] is True
