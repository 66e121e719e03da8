"""
Agendador de Jobs Automáticos

Executa tarefas periódicas do sistema:
- 00:05 Materializar ocorrências de recorrências da agenda (janela de antecedência)
- 00:10 Marcar receitas/despesas vencidas como atrasadas
- 00:15 Gerar receitas recorrentes do dia

Ativado por SCHEDULER_ENABLED=true; create_app chama start_scheduler(app).
"""
import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from gestao_juridica.jobs.atualizar_atrasos import executar_atualizar_atrasos
from gestao_juridica.jobs.processar_recorrencias import executar_processar_recorrencias
from gestao_juridica.services.receita_service import ReceitaService

logger = logging.getLogger(__name__)

# Inicializar scheduler
scheduler = BackgroundScheduler()


def job_processar_recorrencias(app):
    """Job executado diariamente às 00:05"""
    with app.app_context():
        try:
            executar_processar_recorrencias(app.config['JANELA_RECORRENCIA_DIAS'])
        except Exception:
            logger.exception('Erro no job de recorrências')


def job_atualizar_atrasos(app):
    """Job executado diariamente às 00:10"""
    with app.app_context():
        try:
            executar_atualizar_atrasos()
        except Exception:
            logger.exception('Erro no job de atrasos')


def job_gerar_receitas_recorrentes(app):
    with app.app_context():
        try:
            ReceitaService.gerar_recorrentes()
        except Exception:
            logger.exception('Erro no job de receitas recorrentes')


def start_scheduler(app):
    """
    Agenda os jobs e inicia o scheduler (uma única vez por processo)

    Args:
        app: Instância do Flask usada para abrir o app_context dos jobs
    """
    if scheduler.running:
        return

    scheduler.add_job(
        func=job_processar_recorrencias,
        args=[app],
        trigger=CronTrigger(hour=0, minute=5),
        id='processar_recorrencias',
        name='Materializar recorrências da agenda',
        replace_existing=True
    )
    scheduler.add_job(
        func=job_atualizar_atrasos,
        args=[app],
        trigger=CronTrigger(hour=0, minute=10),
        id='atualizar_atrasos',
        name='Marcar receitas e despesas atrasadas',
        replace_existing=True
    )
    scheduler.add_job(
        func=job_gerar_receitas_recorrentes,
        args=[app],
        trigger=CronTrigger(hour=0, minute=15),
        id='gerar_receitas_recorrentes',
        name='Gerar receitas recorrentes',
        replace_existing=True
    )

    scheduler.start()
    # Garantir que o scheduler pare ao encerrar a aplicação
    atexit.register(lambda: scheduler.shutdown(wait=False))
    logger.info('Scheduler iniciado: %s', ', '.join(job.id for job in scheduler.get_jobs()))
