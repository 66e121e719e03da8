from datetime import date

import pytest

from gestao_juridica.services.listagem import ler_paginacao, paginar_lista
from gestao_juridica.services.periodos import (
    inicio_periodo_extrato,
    inicio_semana,
    intervalo_mes,
    intervalo_preset,
    parse_date,
)


def test_parse_date():
    assert parse_date('2024-05-01') == date(2024, 5, 1)
    assert parse_date('2024-05-01T10:30:00') == date(2024, 5, 1)
    assert parse_date(None) is None
    with pytest.raises(ValueError):
        parse_date('31/12/2024')


def test_semana_comeca_no_domingo():
    assert inicio_semana(date(2024, 5, 15)) == date(2024, 5, 12)
    assert inicio_semana(date(2024, 5, 12)) == date(2024, 5, 12)


def test_presets():
    hoje = date(2024, 3, 10)
    assert intervalo_preset('hoje', hoje) == (hoje, hoje)
    assert intervalo_preset('ultimos_7_dias', hoje) == (date(2024, 3, 4), hoje)
    assert intervalo_preset('esta_semana', hoje) == (date(2024, 3, 10), date(2024, 3, 16))
    assert intervalo_preset('este_mes', hoje) == (date(2024, 3, 1), date(2024, 3, 31))
    assert intervalo_preset('mes_passado', hoje) == (date(2024, 2, 1), date(2024, 2, 29))

    with pytest.raises(ValueError):
        intervalo_preset('ano_que_vem', hoje)


def test_periodos_rapidos_do_extrato():
    hoje = date(2024, 3, 31)
    assert inicio_periodo_extrato('semana', hoje) == date(2024, 3, 24)
    assert inicio_periodo_extrato('mes', hoje) == date(2024, 2, 29)
    assert inicio_periodo_extrato('trimestre', hoje) == date(2023, 12, 31)
    assert inicio_periodo_extrato('todos', hoje) is None


def test_intervalo_mes():
    assert intervalo_mes('2024-02') == (date(2024, 2, 1), date(2024, 2, 29))
    assert intervalo_mes(None, date(2023, 11, 5)) == (date(2023, 11, 1), date(2023, 11, 30))
    with pytest.raises(ValueError):
        intervalo_mes('fevereiro')


def test_paginacao():
    resultado = paginar_lista(list(range(120)), pagina=3, por_pagina=50)
    assert resultado['itens'] == list(range(100, 120))
    assert resultado['total'] == 120
    assert resultado['total_paginas'] == 3

    assert paginar_lista([], 1, 50)['total_paginas'] == 0
    assert ler_paginacao({'pagina': '0', 'por_pagina': '1000'}) == (1, 200)
    with pytest.raises(ValueError):
        ler_paginacao({'pagina': 'x'})
