from gestao_juridica.services.validadores import (
    calcular_digito_verificador_cnj,
    extrair_segmento_cnj,
    formatar_cpf_ou_cnpj,
    formatar_numero_cnj,
    validar_cnpj,
    validar_cpf,
    validar_cpf_ou_cnpj,
    validar_numero_cnj,
)


def test_cpf():
    assert validar_cpf('529.982.247-25')
    assert validar_cpf('52998224725')
    assert not validar_cpf('529.982.247-24')
    assert not validar_cpf('111.111.111-11')
    assert not validar_cpf('123')


def test_cnpj():
    assert validar_cnpj('11.222.333/0001-81')
    assert not validar_cnpj('11.222.333/0001-82')
    assert not validar_cnpj('00000000000000')


def test_cpf_ou_cnpj_pelo_tamanho():
    assert validar_cpf_ou_cnpj('52998224725')
    assert validar_cpf_ou_cnpj('11222333000181')
    assert not validar_cpf_ou_cnpj('1234567')
    assert formatar_cpf_ou_cnpj('52998224725') == '529.982.247-25'
    assert formatar_cpf_ou_cnpj('11222333000181') == '11.222.333/0001-81'


def test_formata_numero_cnj_com_vinte_digitos():
    assert formatar_numero_cnj('00000017820208260100') == '0000001-78.2020.8.26.0100'
    assert formatar_numero_cnj('123') == '123'


def test_digito_verificador_cnj():
    assert calcular_digito_verificador_cnj('0000001-00.2020.8.26.0100') == '78'

    assert validar_numero_cnj('0000001-78.2020.8.26.0100') == (True, None)

    valido, erro = validar_numero_cnj('0000001-79.2020.8.26.0100')
    assert not valido
    assert 'Esperado: 78' in erro

    valido, erro = validar_numero_cnj('00000017820208260100')
    assert not valido
    assert 'Formato' in erro


def test_segmento_cnj():
    segmento = extrair_segmento_cnj('0000001-78.2020.8.26.0100')
    assert segmento['segmento_nome'] == 'Justiça Estadual'
    assert segmento['tribunal'] == '26'
    assert segmento['ano'] == '2020'

    assert extrair_segmento_cnj('0000001-00.2020.5.00.0000')['segmento_nome'] == 'Tribunal Superior do Trabalho'
    assert extrair_segmento_cnj('123') is None
