"""
Filtros, ordenação e paginação no servidor para as listagens da API
"""
from __future__ import annotations

import math

POR_PAGINA_MAXIMO = 200


def ler_paginacao(args, padrao: int = 50) -> tuple[int, int]:
    """Lê ?pagina= e ?por_pagina= de request.args"""
    try:
        pagina = int(args.get('pagina', 1))
        por_pagina = int(args.get('por_pagina', padrao))
    except (TypeError, ValueError):
        raise ValueError('Parâmetros de paginação inválidos')
    return max(pagina, 1), min(max(por_pagina, 1), POR_PAGINA_MAXIMO)


def ler_bool(valor) -> bool | None:
    if valor is None or valor == '':
        return None
    return str(valor).lower() in ('1', 'true', 'sim', 'yes')


def aplicar_ordenacao(query, modelo, campo: str | None, direcao: str | None, permitidos, padrao=None):
    """
    Ordena a query por uma coluna permitida

    Args:
        campo: Nome da coluna (None usa o padrão)
        direcao: 'asc' ou 'desc'
        permitidos: Colunas liberadas para ordenação
        padrao: Expressão de ordenação usada quando campo é None

    Raises:
        ValueError: Coluna não permitida
    """
    if not campo:
        return query.order_by(padrao) if padrao is not None else query

    if campo not in permitidos:
        raise ValueError(f'Ordenação inválida. Use um dos seguintes: {", ".join(permitidos)}')

    coluna = getattr(modelo, campo)
    return query.order_by(coluna.desc() if direcao == 'desc' else coluna.asc(), modelo.id.desc())


def paginar(query, pagina: int = 1, por_pagina: int = 50) -> dict:
    """Pagina uma query SQLAlchemy (Flask-SQLAlchemy paginate)"""
    pagina = max(int(pagina or 1), 1)
    por_pagina = min(max(int(por_pagina or 1), 1), POR_PAGINA_MAXIMO)
    resultado = query.paginate(page=pagina, per_page=por_pagina, error_out=False)
    return {
        'itens': resultado.items,
        'pagina': pagina,
        'por_pagina': por_pagina,
        'total': resultado.total,
        'total_paginas': resultado.pages
    }


def paginar_lista(itens: list, pagina: int = 1, por_pagina: int = 50) -> dict:
    """Mesmo formato de paginar() para listas já montadas em memória"""
    pagina = max(int(pagina or 1), 1)
    por_pagina = min(max(int(por_pagina or 1), 1), POR_PAGINA_MAXIMO)
    inicio = (pagina - 1) * por_pagina
    total = len(itens)
    return {
        'itens': itens[inicio:inicio + por_pagina],
        'pagina': pagina,
        'por_pagina': por_pagina,
        'total': total,
        'total_paginas': math.ceil(total / por_pagina) if total else 0
    }
