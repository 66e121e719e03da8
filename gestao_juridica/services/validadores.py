"""
Validação e formatação de documentos brasileiros

- CPF / CNPJ: dígitos verificadores oficiais (módulo 11)
- Número CNJ (Resolução 65/2008): NNNNNNN-DD.AAAA.J.TR.OOOO, DV módulo 97
"""
from __future__ import annotations

import re

REGEX_CNJ = re.compile(r'^\d{7}-\d{2}\.\d{4}\.\d\.\d{2}\.\d{4}$')

SEGMENTOS_JUSTICA = {
    '1': 'Supremo Tribunal Federal',
    '2': 'Conselho Nacional de Justiça',
    '3': 'Superior Tribunal de Justiça',
    '4': 'Justiça Federal',
    '5': 'Justiça do Trabalho',
    '6': 'Justiça Eleitoral',
    '7': 'Justiça Militar da União',
    '8': 'Justiça Estadual',
    '9': 'Justiça Militar Estadual',
}


def somente_digitos(valor) -> str:
    return re.sub(r'\D', '', str(valor or ''))


# ============================================================================
# CPF / CNPJ
# ============================================================================

def validar_cpf(cpf) -> bool:
    digitos = somente_digitos(cpf)
    if len(digitos) != 11 or digitos == digitos[0] * 11:
        return False

    numeros = [int(d) for d in digitos]
    for posicao in (9, 10):
        soma = sum(numeros[i] * (posicao + 1 - i) for i in range(posicao))
        resto = (soma * 10) % 11
        if resto == 10:
            resto = 0
        if resto != numeros[posicao]:
            return False
    return True


def validar_cnpj(cnpj) -> bool:
    digitos = somente_digitos(cnpj)
    if len(digitos) != 14 or digitos == digitos[0] * 14:
        return False

    numeros = [int(d) for d in digitos]
    pesos = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    for posicao in (12, 13):
        soma = sum(n * p for n, p in zip(numeros[:posicao], pesos))
        resto = soma % 11
        dv = 0 if resto < 2 else 11 - resto
        if dv != numeros[posicao]:
            return False
        pesos = [6] + pesos
    return True


def validar_cpf_ou_cnpj(documento) -> bool:
    digitos = somente_digitos(documento)
    if len(digitos) == 11:
        return validar_cpf(digitos)
    if len(digitos) == 14:
        return validar_cnpj(digitos)
    return False


def formatar_cpf(cpf) -> str:
    digitos = somente_digitos(cpf)
    if len(digitos) != 11:
        return cpf
    return f'{digitos[:3]}.{digitos[3:6]}.{digitos[6:9]}-{digitos[9:]}'


def formatar_cnpj(cnpj) -> str:
    digitos = somente_digitos(cnpj)
    if len(digitos) != 14:
        return cnpj
    return f'{digitos[:2]}.{digitos[2:5]}.{digitos[5:8]}/{digitos[8:12]}-{digitos[12:]}'


def formatar_cpf_ou_cnpj(documento) -> str:
    digitos = somente_digitos(documento)
    if len(digitos) == 11:
        return formatar_cpf(digitos)
    if len(digitos) == 14:
        return formatar_cnpj(digitos)
    return documento


# ============================================================================
# NÚMERO CNJ
# ============================================================================

def validar_formato_cnj(numero) -> bool:
    return bool(numero) and bool(REGEX_CNJ.match(str(numero).strip()))


def limpar_numero_cnj(numero) -> str:
    return somente_digitos(numero)


def formatar_numero_cnj(numero) -> str:
    """Formata 20 dígitos como NNNNNNN-DD.AAAA.J.TR.OOOO (outros valores voltam como vieram)"""
    d = limpar_numero_cnj(numero)
    if len(d) != 20:
        return numero
    return f'{d[:7]}-{d[7:9]}.{d[9:13]}.{d[13]}.{d[14:16]}.{d[16:]}'


def calcular_digito_verificador_cnj(numero) -> str:
    """
    Calcula o DV do número CNJ (ISO 7064, módulo 97 base 10)

    Args:
        numero: Número com 20 dígitos (formatado ou não); o DV informado é ignorado

    Returns:
        str: DV com 2 dígitos

    Raises:
        ValueError: Se o número não tiver 20 dígitos
    """
    d = limpar_numero_cnj(numero)
    if len(d) != 20:
        raise ValueError('Número CNJ deve conter 20 dígitos')

    sequencial, ano, segmento, tribunal, origem = d[:7], d[9:13], d[13], d[14:16], d[16:]
    resto = int(f'{sequencial}{ano}{segmento}{tribunal}{origem}00') % 97
    return str(98 - resto).zfill(2)


def validar_numero_cnj(numero) -> tuple[bool, str | None]:
    """
    Valida formato e dígito verificador de um número CNJ

    Returns:
        tuple: (valido, mensagem_erro)
    """
    if not validar_formato_cnj(numero):
        return False, 'Formato inválido. Use NNNNNNN-DD.AAAA.J.TR.OOOO'

    informado = limpar_numero_cnj(numero)[7:9]
    esperado = calcular_digito_verificador_cnj(numero)
    if informado != esperado:
        return False, f'Digito verificador invalido. Esperado: {esperado}, informado: {informado}'

    return True, None


def extrair_segmento_cnj(numero) -> dict | None:
    """Identifica o segmento da Justiça (J) e o tribunal (TR) do número CNJ"""
    d = limpar_numero_cnj(numero)
    if len(d) != 20:
        return None

    segmento, tribunal = d[13], d[14:16]
    nome = SEGMENTOS_JUSTICA.get(segmento)
    if not nome:
        return None

    if segmento == '5' and tribunal == '00':
        nome = 'Tribunal Superior do Trabalho'
    elif segmento == '6' and tribunal == '00':
        nome = 'Tribunal Superior Eleitoral'

    return {
        'segmento': segmento,
        'segmento_nome': nome,
        'tribunal': tribunal,
        'ano': d[9:13],
        'origem': d[16:]
    }
