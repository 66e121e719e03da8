"""
Job Diário: Atualizar atrasos do financeiro

Marca como 'atrasado' as receitas e despesas pendentes com vencimento
anterior a hoje e recalcula os dias de atraso das receitas.

Pode ser agendado via:
- Cron (Linux/Mac): 10 0 * * * python -m gestao_juridica.jobs.atualizar_atrasos
- APScheduler (SCHEDULER_ENABLED=true)
"""
import sys
from datetime import date

from gestao_juridica.models import db
from gestao_juridica.services import extrato_service


def executar_atualizar_atrasos(hoje=None):
    """Executa a atualização dentro de um app_context já aberto"""
    try:
        resultado = extrato_service.atualizar_atrasos(hoje)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return resultado


def main():
    from gestao_juridica.app import create_app

    app = create_app()
    with app.app_context():
        print("=" * 70)
        print(f" JOB: Atualizacao de atrasos - {date.today().strftime('%d/%m/%Y')}")
        print("=" * 70)

        try:
            resultado = executar_atualizar_atrasos()
        except Exception as e:
            print(f"ERRO ao atualizar atrasos: {str(e)}")
            sys.exit(1)

        print(f"OK - {resultado['receitas_atrasadas']} receita(s) e "
              f"{resultado['despesas_atrasadas']} despesa(s) marcadas como atrasadas")
        print("=" * 70)


if __name__ == '__main__':
    main()
