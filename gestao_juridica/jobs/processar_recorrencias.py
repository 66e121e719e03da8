"""
Job Diário: Materializar ocorrências das recorrências da agenda

Cria as tarefas, eventos e audiências recorrentes que caem dentro da janela
de antecedência (JANELA_RECORRENCIA_DIAS, padrão 45 dias).

Pode ser agendado via:
- Cron (Linux/Mac): 5 0 * * * python -m gestao_juridica.jobs.processar_recorrencias
- APScheduler (SCHEDULER_ENABLED=true)
"""
import logging
import sys
from datetime import date

from gestao_juridica.services import recorrencia_service

logger = logging.getLogger(__name__)


def executar_processar_recorrencias(janela_dias=None, hoje=None):
    """Executa a materialização dentro de um app_context já aberto"""
    hoje = hoje or date.today()
    resultado = recorrencia_service.processar_janela(hoje, janela_dias)
    for erro in resultado['erros']:
        logger.error('Recorrência %s: %s', erro['recorrencia_id'], erro['erro'])
    return resultado


def main():
    from gestao_juridica.app import create_app

    app = create_app()
    with app.app_context():
        print("=" * 70)
        print(f" JOB: Recorrencias da agenda - {date.today().strftime('%d/%m/%Y')}")
        print("=" * 70)

        resultado = executar_processar_recorrencias(app.config['JANELA_RECORRENCIA_DIAS'])

        print(f"OK - {resultado['recorrencias_processadas']} recorrencia(s) processada(s), "
              f"{resultado['ocorrencias_criadas']} ocorrencia(s) criada(s)")
        if resultado['erros']:
            print(f"ATENCAO - {len(resultado['erros'])} recorrencia(s) com erro (ver log)")
            sys.exit(1)
        print("=" * 70)


if __name__ == '__main__':
    main()
