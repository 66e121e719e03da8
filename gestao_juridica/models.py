"""
Modelos do banco de dados - Gestão Jurídica

Tabelas organizadas em 4 módulos:
- Módulo 1: Cadastro (Clientes, Processos, Contratos de Honorários)
- Módulo 2: Financeiro (Contas Bancárias, Lançamentos, Transferências, Receitas, Despesas)
- Módulo 3: Agenda (Tarefas, Checklist, Eventos, Audiências)
- Módulo 4: Recorrências e Feriados
"""
from datetime import datetime, date
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _float(valor):
    return float(valor) if valor is not None else None


def _iso(valor):
    return valor.isoformat() if valor else None


# ============================================================================
# MÓDULO 1: CADASTRO
# ============================================================================

class Cliente(db.Model):
    """
    Cliente do escritório (pessoa física ou jurídica)
    """
    __tablename__ = 'cliente'

    id = db.Column(db.Integer, primary_key=True)
    nome_completo = db.Column(db.String(200), nullable=False)
    nome_fantasia = db.Column(db.String(200))
    tipo_pessoa = db.Column(db.String(2), default='pf')  # pf ou pj
    cpf_cnpj = db.Column(db.String(20), unique=True)  # Apenas dígitos
    email = db.Column(db.String(150))
    telefone = db.Column(db.String(30))
    endereco = db.Column(db.String(300))
    observacoes = db.Column(db.Text)
    ativo = db.Column(db.Boolean, default=True)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    processos = db.relationship('Processo', back_populates='cliente', lazy='dynamic')
    contratos = db.relationship('ContratoHonorario', back_populates='cliente', lazy='dynamic')

    __table_args__ = (
        db.Index('idx_cliente_nome', 'nome_completo'),
    )

    def __repr__(self):
        return f'<Cliente {self.nome_completo}>'

    def to_dict(self):
        return {
            'id': self.id,
            'nome_completo': self.nome_completo,
            'nome_fantasia': self.nome_fantasia,
            'tipo_pessoa': self.tipo_pessoa,
            'cpf_cnpj': self.cpf_cnpj,
            'email': self.email,
            'telefone': self.telefone,
            'endereco': self.endereco,
            'observacoes': self.observacoes,
            'ativo': self.ativo,
            'criado_em': self.criado_em.strftime('%Y-%m-%d %H:%M:%S') if self.criado_em else None
        }


class ContratoHonorario(db.Model):
    """
    Contrato de honorários firmado com um cliente

    A forma de cobrança define quais campos de valor são usados
    (valor_fixo, valor_hora, percentual_exito, valor_por_processo...).
    """
    __tablename__ = 'contrato_honorario'

    id = db.Column(db.Integer, primary_key=True)
    numero_contrato = db.Column(db.String(20), nullable=False, unique=True)  # CONT-0001
    cliente_id = db.Column(db.Integer, db.ForeignKey('cliente.id'), nullable=False)
    titulo = db.Column(db.String(200), nullable=False)
    descricao = db.Column(db.Text)
    tipo_servico = db.Column(db.String(20), default='processo')
    forma_cobranca = db.Column(db.String(20), nullable=False, default='fixo')

    # Configuração de valores
    valor_fixo = db.Column(db.Numeric(15, 2))
    valor_hora = db.Column(db.Numeric(15, 2))
    horas_estimadas = db.Column(db.Numeric(10, 2))
    percentual_exito = db.Column(db.Numeric(5, 2))
    valor_minimo_exito = db.Column(db.Numeric(15, 2))
    valor_por_processo = db.Column(db.Numeric(15, 2))
    dia_cobranca = db.Column(db.Integer)  # 1-31

    data_inicio = db.Column(db.Date, default=date.today)
    data_fim = db.Column(db.Date)
    ativo = db.Column(db.Boolean, default=True)
    observacoes = db.Column(db.Text)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    cliente = db.relationship('Cliente', back_populates='contratos')
    processos = db.relationship('Processo', back_populates='contrato', lazy='dynamic')
    receitas = db.relationship('Receita', back_populates='contrato', lazy='dynamic')

    __table_args__ = (
        db.Index('idx_contrato_cliente', 'cliente_id'),
    )

    def __repr__(self):
        return f'<ContratoHonorario {self.numero_contrato}>'

    def to_dict(self):
        return {
            'id': self.id,
            'numero_contrato': self.numero_contrato,
            'cliente_id': self.cliente_id,
            'cliente_nome': self.cliente.nome_completo if self.cliente else None,
            'titulo': self.titulo,
            'descricao': self.descricao,
            'tipo_servico': self.tipo_servico,
            'forma_cobranca': self.forma_cobranca,
            'valor_fixo': _float(self.valor_fixo),
            'valor_hora': _float(self.valor_hora),
            'horas_estimadas': _float(self.horas_estimadas),
            'percentual_exito': _float(self.percentual_exito),
            'valor_minimo_exito': _float(self.valor_minimo_exito),
            'valor_por_processo': _float(self.valor_por_processo),
            'dia_cobranca': self.dia_cobranca,
            'data_inicio': _iso(self.data_inicio),
            'data_fim': _iso(self.data_fim),
            'ativo': self.ativo,
            'observacoes': self.observacoes
        }


class Processo(db.Model):
    """
    Processo judicial/administrativo acompanhado pelo escritório

    numero_pasta é o número interno sequencial; numero_cnj é o número
    unificado (NNNNNNN-DD.AAAA.J.TR.OOOO), opcional.
    """
    __tablename__ = 'processo'

    id = db.Column(db.Integer, primary_key=True)
    numero_pasta = db.Column(db.String(20), nullable=False, unique=True)
    numero_cnj = db.Column(db.String(25), unique=True)
    cliente_id = db.Column(db.Integer, db.ForeignKey('cliente.id'), nullable=False)
    contrato_id = db.Column(db.Integer, db.ForeignKey('contrato_honorario.id'))
    parte_contraria = db.Column(db.String(200))
    objeto = db.Column(db.Text)

    # Classificação
    area = db.Column(db.String(20), default='civel')
    fase = db.Column(db.String(30), default='conhecimento')
    instancia = db.Column(db.String(20), default='1a')
    rito = db.Column(db.String(20))
    polo_cliente = db.Column(db.String(10), default='ativo')
    tipo = db.Column(db.String(20), default='judicial')
    status = db.Column(db.String(20), nullable=False, default='ativo')
    provisao_perda = db.Column(db.String(10))
    valor_causa = db.Column(db.Numeric(15, 2))
    responsavel = db.Column(db.String(100))

    # Localização
    tribunal = db.Column(db.String(50))
    comarca = db.Column(db.String(100))
    vara = db.Column(db.String(100))
    data_distribuicao = db.Column(db.Date)

    # Encerramento
    data_encerramento = db.Column(db.Date)
    data_arquivamento = db.Column(db.Date)
    encerrado_em = db.Column(db.DateTime)
    resultado = db.Column(db.String(20))
    valor_acordo = db.Column(db.Numeric(15, 2))
    valor_condenacao = db.Column(db.Numeric(15, 2))
    data_transito_julgado = db.Column(db.Date)
    resumo_encerramento = db.Column(db.Text)

    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    cliente = db.relationship('Cliente', back_populates='processos')
    contrato = db.relationship('ContratoHonorario', back_populates='processos')
    tarefas = db.relationship('Tarefa', back_populates='processo', lazy='dynamic')
    audiencias = db.relationship('Audiencia', back_populates='processo', lazy='dynamic')

    __table_args__ = (
        db.Index('idx_processo_status', 'status'),
        db.Index('idx_processo_cliente', 'cliente_id'),
    )

    def __repr__(self):
        return f'<Processo {self.numero_pasta} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'numero_pasta': self.numero_pasta,
            'numero_cnj': self.numero_cnj,
            'cliente_id': self.cliente_id,
            'cliente_nome': self.cliente.nome_completo if self.cliente else None,
            'contrato_id': self.contrato_id,
            'parte_contraria': self.parte_contraria,
            'objeto': self.objeto,
            'area': self.area,
            'fase': self.fase,
            'instancia': self.instancia,
            'rito': self.rito,
            'polo_cliente': self.polo_cliente,
            'tipo': self.tipo,
            'status': self.status,
            'provisao_perda': self.provisao_perda,
            'valor_causa': _float(self.valor_causa),
            'responsavel': self.responsavel,
            'tribunal': self.tribunal,
            'comarca': self.comarca,
            'vara': self.vara,
            'data_distribuicao': _iso(self.data_distribuicao),
            'data_encerramento': _iso(self.data_encerramento),
            'data_arquivamento': _iso(self.data_arquivamento),
            'resultado': self.resultado,
            'valor_acordo': _float(self.valor_acordo),
            'valor_condenacao': _float(self.valor_condenacao),
            'data_transito_julgado': _iso(self.data_transito_julgado),
            'resumo_encerramento': self.resumo_encerramento
        }


# ============================================================================
# MÓDULO 2: FINANCEIRO
# ============================================================================

class ContaBancaria(db.Model):
    """
    Contas bancárias do escritório (corrente, poupança, investimento, caixa)

    saldo_atual só é alterado por lançamentos (ver ContaBancariaService.lancar).
    """
    __tablename__ = 'conta_bancaria'

    id = db.Column(db.Integer, primary_key=True)
    banco = db.Column(db.String(100), nullable=False)
    agencia = db.Column(db.String(20))
    numero_conta = db.Column(db.String(30))
    tipo_conta = db.Column(db.String(20), nullable=False, default='corrente')
    titular = db.Column(db.String(200))
    saldo_inicial = db.Column(db.Numeric(15, 2), default=0)
    saldo_atual = db.Column(db.Numeric(15, 2), default=0)
    conta_principal = db.Column(db.Boolean, default=False)
    cor = db.Column(db.String(7), default='#3b82f6')
    ativa = db.Column(db.Boolean, default=True)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<ContaBancaria {self.banco} {self.numero_conta}>'

    def to_dict(self):
        return {
            'id': self.id,
            'banco': self.banco,
            'agencia': self.agencia,
            'numero_conta': self.numero_conta,
            'tipo_conta': self.tipo_conta,
            'titular': self.titular,
            'saldo_inicial': float(self.saldo_inicial) if self.saldo_inicial else 0,
            'saldo_atual': float(self.saldo_atual) if self.saldo_atual else 0,
            'conta_principal': self.conta_principal,
            'cor': self.cor,
            'ativa': self.ativa,
            'criado_em': self.criado_em.strftime('%Y-%m-%d %H:%M:%S') if self.criado_em else None
        }


class Transferencia(db.Model):
    """
    Movimentação de dinheiro entre duas contas bancárias do escritório
    """
    __tablename__ = 'transferencia'

    id = db.Column(db.Integer, primary_key=True)
    conta_origem_id = db.Column(db.Integer, db.ForeignKey('conta_bancaria.id'), nullable=False)
    conta_destino_id = db.Column(db.Integer, db.ForeignKey('conta_bancaria.id'), nullable=False)
    valor = db.Column(db.Numeric(15, 2), nullable=False)
    data_transferencia = db.Column(db.Date, nullable=False)
    descricao = db.Column(db.String(200))
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)

    # Relacionamentos
    conta_origem = db.relationship('ContaBancaria', foreign_keys=[conta_origem_id])
    conta_destino = db.relationship('ContaBancaria', foreign_keys=[conta_destino_id])

    __table_args__ = (
        db.Index('idx_transf_data', 'data_transferencia'),
    )

    def __repr__(self):
        return f'<Transferencia R${self.valor} {self.conta_origem_id}->{self.conta_destino_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'conta_origem_id': self.conta_origem_id,
            'conta_destino_id': self.conta_destino_id,
            'valor': float(self.valor),
            'data_transferencia': self.data_transferencia.strftime('%Y-%m-%d'),
            'descricao': self.descricao
        }


class Lancamento(db.Model):
    """
    Linha do razão de uma conta bancária (entrada ou saída)

    origem_tipo/origem_id apontam para o que gerou o lançamento:
    receita, despesa, transferencia ou manual.
    """
    __tablename__ = 'lancamento'

    id = db.Column(db.Integer, primary_key=True)
    conta_bancaria_id = db.Column(db.Integer, db.ForeignKey('conta_bancaria.id'), nullable=False)
    tipo = db.Column(db.String(10), nullable=False)  # entrada ou saida
    valor = db.Column(db.Numeric(15, 2), nullable=False)
    descricao = db.Column(db.String(200), nullable=False)
    categoria = db.Column(db.String(50), default='outros')
    data_lancamento = db.Column(db.Date, nullable=False, default=date.today)
    origem_tipo = db.Column(db.String(20), nullable=False, default='manual')
    origem_id = db.Column(db.Integer)
    transferencia_id = db.Column(db.Integer, db.ForeignKey('transferencia.id'))
    saldo_apos_lancamento = db.Column(db.Numeric(15, 2))
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)

    # Relacionamentos
    conta_bancaria = db.relationship('ContaBancaria', backref=db.backref('lancamentos', lazy='dynamic'))

    __table_args__ = (
        db.Index('idx_lancamento_conta', 'conta_bancaria_id'),
        db.Index('idx_lancamento_data', 'data_lancamento'),
        db.Index('idx_lancamento_origem', 'origem_tipo', 'origem_id'),
    )

    def __repr__(self):
        return f'<Lancamento {self.tipo} R${self.valor} conta={self.conta_bancaria_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'conta_bancaria_id': self.conta_bancaria_id,
            'tipo': self.tipo,
            'valor': float(self.valor),
            'descricao': self.descricao,
            'categoria': self.categoria,
            'data_lancamento': _iso(self.data_lancamento),
            'origem_tipo': self.origem_tipo,
            'origem_id': self.origem_id,
            'transferencia_id': self.transferencia_id,
            'saldo_apos_lancamento': _float(self.saldo_apos_lancamento)
        }


class Receita(db.Model):
    """
    Receita do escritório (honorários, parcelas, avulsas e saldos)

    - Parcelado: a receita "pai" guarda o total e as parcelas apontam para ela
      via receita_pai_id (tipo 'parcela').
    - Pagamento parcial: o restante vira uma nova receita tipo 'saldo'
      apontando para a original via receita_origem_id.
    """
    __tablename__ = 'receita'

    id = db.Column(db.Integer, primary_key=True)
    tipo = db.Column(db.String(20), nullable=False, default='avulso')
    cliente_id = db.Column(db.Integer, db.ForeignKey('cliente.id'))
    processo_id = db.Column(db.Integer, db.ForeignKey('processo.id'))
    contrato_id = db.Column(db.Integer, db.ForeignKey('contrato_honorario.id'))
    receita_pai_id = db.Column(db.Integer, db.ForeignKey('receita.id'))
    receita_origem_id = db.Column(db.Integer, db.ForeignKey('receita.id'))
    receita_recorrente_id = db.Column(db.Integer, db.ForeignKey('receita.id'))  # Série recorrente
    numero_parcela = db.Column(db.Integer)

    descricao = db.Column(db.String(200), nullable=False)
    categoria = db.Column(db.String(30), default='honorario')
    valor = db.Column(db.Numeric(15, 2), nullable=False)
    data_competencia = db.Column(db.Date)  # Sempre o 1º dia do mês
    data_vencimento = db.Column(db.Date, nullable=False)
    data_pagamento = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default='pendente')
    valor_pago = db.Column(db.Numeric(15, 2))
    forma_pagamento = db.Column(db.String(20))
    conta_bancaria_id = db.Column(db.Integer, db.ForeignKey('conta_bancaria.id'))

    # Recorrência e parcelamento
    recorrente = db.Column(db.Boolean, default=False)
    config_recorrencia = db.Column(db.JSON)
    parcelado = db.Column(db.Boolean, default=False)
    numero_parcelas = db.Column(db.Integer)

    dias_atraso = db.Column(db.Integer, default=0)
    observacoes = db.Column(db.Text)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    cliente = db.relationship('Cliente')
    processo = db.relationship('Processo')
    contrato = db.relationship('ContratoHonorario', back_populates='receitas')
    conta_bancaria = db.relationship('ContaBancaria')
    parcelas = db.relationship('Receita', foreign_keys=[receita_pai_id],
                               backref=db.backref('receita_pai', remote_side=[id]),
                               order_by='Receita.numero_parcela', lazy='dynamic')
    saldos = db.relationship('Receita', foreign_keys=[receita_origem_id],
                             backref=db.backref('receita_origem', remote_side=[id]),
                             lazy='dynamic')

    __table_args__ = (
        db.Index('idx_receita_status', 'status'),
        db.Index('idx_receita_vencimento', 'data_vencimento'),
        db.Index('idx_receita_contrato', 'contrato_id'),
    )

    def __repr__(self):
        return f'<Receita {self.descricao} R${self.valor} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'tipo': self.tipo,
            'cliente_id': self.cliente_id,
            'cliente_nome': self.cliente.nome_completo if self.cliente else None,
            'processo_id': self.processo_id,
            'contrato_id': self.contrato_id,
            'receita_pai_id': self.receita_pai_id,
            'receita_origem_id': self.receita_origem_id,
            'receita_recorrente_id': self.receita_recorrente_id,
            'numero_parcela': self.numero_parcela,
            'descricao': self.descricao,
            'categoria': self.categoria,
            'valor': float(self.valor),
            'data_competencia': _iso(self.data_competencia),
            'data_vencimento': _iso(self.data_vencimento),
            'data_pagamento': _iso(self.data_pagamento),
            'status': self.status,
            'valor_pago': _float(self.valor_pago),
            'forma_pagamento': self.forma_pagamento,
            'conta_bancaria_id': self.conta_bancaria_id,
            'recorrente': self.recorrente,
            'config_recorrencia': self.config_recorrencia,
            'parcelado': self.parcelado,
            'numero_parcelas': self.numero_parcelas,
            'dias_atraso': self.dias_atraso or 0,
            'observacoes': self.observacoes
        }


class Despesa(db.Model):
    """
    Despesa do escritório ou adiantada em nome de um cliente (custas, perícia...)
    """
    __tablename__ = 'despesa'

    id = db.Column(db.Integer, primary_key=True)
    categoria = db.Column(db.String(30), nullable=False, default='outra')
    fornecedor = db.Column(db.String(200))
    descricao = db.Column(db.String(200), nullable=False)
    valor = db.Column(db.Numeric(15, 2), nullable=False)
    data_vencimento = db.Column(db.Date, nullable=False)
    data_pagamento = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default='pendente')
    forma_pagamento = db.Column(db.String(20))
    processo_id = db.Column(db.Integer, db.ForeignKey('processo.id'))
    cliente_id = db.Column(db.Integer, db.ForeignKey('cliente.id'))
    reembolsavel = db.Column(db.Boolean, default=False)
    conta_bancaria_id = db.Column(db.Integer, db.ForeignKey('conta_bancaria.id'))
    observacoes = db.Column(db.Text)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    processo = db.relationship('Processo')
    cliente = db.relationship('Cliente')
    conta_bancaria = db.relationship('ContaBancaria')

    __table_args__ = (
        db.Index('idx_despesa_status', 'status'),
        db.Index('idx_despesa_vencimento', 'data_vencimento'),
    )

    def __repr__(self):
        return f'<Despesa {self.descricao} R${self.valor} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'categoria': self.categoria,
            'fornecedor': self.fornecedor,
            'descricao': self.descricao,
            'valor': float(self.valor),
            'data_vencimento': _iso(self.data_vencimento),
            'data_pagamento': _iso(self.data_pagamento),
            'status': self.status,
            'forma_pagamento': self.forma_pagamento,
            'processo_id': self.processo_id,
            'cliente_id': self.cliente_id,
            'reembolsavel': self.reembolsavel,
            'conta_bancaria_id': self.conta_bancaria_id,
            'observacoes': self.observacoes
        }


# ============================================================================
# MÓDULO 3: AGENDA
# ============================================================================

class Tarefa(db.Model):
    """
    Tarefa da agenda. Quando tem prazo processual, prazo_data_limite é o
    prazo fatal e data_inicio é a data planejada de execução.
    """
    __tablename__ = 'tarefa'

    id = db.Column(db.Integer, primary_key=True)
    titulo = db.Column(db.String(200), nullable=False)
    descricao = db.Column(db.Text)
    tipo = db.Column(db.String(30), default='outro')
    prioridade = db.Column(db.String(10), nullable=False, default='media')
    status = db.Column(db.String(20), nullable=False, default='pendente')
    data_inicio = db.Column(db.Date, nullable=False)
    data_fim = db.Column(db.Date)
    data_conclusao = db.Column(db.DateTime)
    horario_planejado_dia = db.Column(db.String(5))  # HH:MM
    duracao_planejada_minutos = db.Column(db.Integer)
    progresso_percentual = db.Column(db.Integer, default=0)
    responsavel = db.Column(db.String(100))
    processo_id = db.Column(db.Integer, db.ForeignKey('processo.id'))
    cor = db.Column(db.String(7))

    # Prazo processual
    prazo_data_intimacao = db.Column(db.Date)
    prazo_quantidade_dias = db.Column(db.Integer)
    prazo_dias_uteis = db.Column(db.Boolean, default=True)
    prazo_data_limite = db.Column(db.Date)
    prazo_tipo = db.Column(db.String(20))
    prazo_cumprido = db.Column(db.Boolean, default=False)

    # Ocorrência de recorrência (recorrencia_data = data original da série)
    recorrencia_id = db.Column(db.Integer, db.ForeignKey('recorrencia.id'))
    recorrencia_data = db.Column(db.Date)

    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    processo = db.relationship('Processo', back_populates='tarefas')
    checklist = db.relationship('TarefaChecklistItem', back_populates='tarefa',
                                order_by='TarefaChecklistItem.ordem',
                                cascade='all, delete-orphan')

    __table_args__ = (
        db.Index('idx_tarefa_data', 'data_inicio'),
        db.Index('idx_tarefa_prazo', 'prazo_data_limite'),
        db.Index('idx_tarefa_recorrencia', 'recorrencia_id', 'recorrencia_data'),
    )

    def __repr__(self):
        return f'<Tarefa {self.titulo} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'titulo': self.titulo,
            'descricao': self.descricao,
            'tipo': self.tipo,
            'prioridade': self.prioridade,
            'status': self.status,
            'data_inicio': _iso(self.data_inicio),
            'data_fim': _iso(self.data_fim),
            'data_conclusao': _iso(self.data_conclusao),
            'horario_planejado_dia': self.horario_planejado_dia,
            'duracao_planejada_minutos': self.duracao_planejada_minutos,
            'progresso_percentual': self.progresso_percentual or 0,
            'responsavel': self.responsavel,
            'processo_id': self.processo_id,
            'cor': self.cor,
            'prazo_data_intimacao': _iso(self.prazo_data_intimacao),
            'prazo_quantidade_dias': self.prazo_quantidade_dias,
            'prazo_dias_uteis': self.prazo_dias_uteis,
            'prazo_data_limite': _iso(self.prazo_data_limite),
            'prazo_tipo': self.prazo_tipo,
            'prazo_cumprido': self.prazo_cumprido,
            'recorrencia_id': self.recorrencia_id,
            'recorrencia_data': _iso(self.recorrencia_data),
            'checklist': [item.to_dict() for item in self.checklist]
        }


class TarefaChecklistItem(db.Model):
    """
    Item de checklist de uma tarefa
    """
    __tablename__ = 'tarefa_checklist_item'

    id = db.Column(db.Integer, primary_key=True)
    tarefa_id = db.Column(db.Integer, db.ForeignKey('tarefa.id'), nullable=False)
    item = db.Column(db.String(300), nullable=False)
    concluido = db.Column(db.Boolean, default=False)
    ordem = db.Column(db.Integer, default=0)
    concluido_em = db.Column(db.DateTime)

    tarefa = db.relationship('Tarefa', back_populates='checklist')

    def __repr__(self):
        return f'<TarefaChecklistItem {self.item}>'

    def to_dict(self):
        return {
            'id': self.id,
            'tarefa_id': self.tarefa_id,
            'item': self.item,
            'concluido': self.concluido,
            'ordem': self.ordem,
            'concluido_em': _iso(self.concluido_em)
        }


class Evento(db.Model):
    """
    Compromisso da agenda (reunião, atendimento, diligência...)
    """
    __tablename__ = 'evento'

    id = db.Column(db.Integer, primary_key=True)
    titulo = db.Column(db.String(200), nullable=False)
    descricao = db.Column(db.Text)
    data_inicio = db.Column(db.DateTime, nullable=False)
    data_fim = db.Column(db.DateTime)
    dia_inteiro = db.Column(db.Boolean, default=False)
    local = db.Column(db.String(200))
    status = db.Column(db.String(20), nullable=False, default='agendado')
    responsavel = db.Column(db.String(100))
    processo_id = db.Column(db.Integer, db.ForeignKey('processo.id'))
    cor = db.Column(db.String(7))
    recorrencia_id = db.Column(db.Integer, db.ForeignKey('recorrencia.id'))
    recorrencia_data = db.Column(db.Date)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)

    processo = db.relationship('Processo')

    __table_args__ = (
        db.Index('idx_evento_data', 'data_inicio'),
        db.Index('idx_evento_recorrencia', 'recorrencia_id', 'recorrencia_data'),
    )

    def __repr__(self):
        return f'<Evento {self.titulo} {self.data_inicio}>'

    def to_dict(self):
        return {
            'id': self.id,
            'titulo': self.titulo,
            'descricao': self.descricao,
            'data_inicio': _iso(self.data_inicio),
            'data_fim': _iso(self.data_fim),
            'dia_inteiro': self.dia_inteiro,
            'local': self.local,
            'status': self.status,
            'responsavel': self.responsavel,
            'processo_id': self.processo_id,
            'cor': self.cor,
            'recorrencia_id': self.recorrencia_id,
            'recorrencia_data': _iso(self.recorrencia_data)
        }


class Audiencia(db.Model):
    """
    Audiência de um processo
    """
    __tablename__ = 'audiencia'

    id = db.Column(db.Integer, primary_key=True)
    processo_id = db.Column(db.Integer, db.ForeignKey('processo.id'), nullable=False)
    titulo = db.Column(db.String(200))
    tipo_audiencia = db.Column(db.String(20), nullable=False, default='outra')
    modalidade = db.Column(db.String(20), default='presencial')
    data_hora = db.Column(db.DateTime, nullable=False)
    duracao_minutos = db.Column(db.Integer, default=60)
    tribunal = db.Column(db.String(50))
    comarca = db.Column(db.String(100))
    vara = db.Column(db.String(100))
    forum = db.Column(db.String(200))
    sala = db.Column(db.String(50))
    link_virtual = db.Column(db.String(500))
    juiz = db.Column(db.String(150))
    responsavel = db.Column(db.String(100))
    status = db.Column(db.String(20), nullable=False, default='agendada')
    resultado_tipo = db.Column(db.String(30))
    resultado_descricao = db.Column(db.Text)
    observacoes = db.Column(db.Text)
    recorrencia_id = db.Column(db.Integer, db.ForeignKey('recorrencia.id'))
    recorrencia_data = db.Column(db.Date)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)

    processo = db.relationship('Processo', back_populates='audiencias')

    __table_args__ = (
        db.Index('idx_audiencia_data', 'data_hora'),
        db.Index('idx_audiencia_recorrencia', 'recorrencia_id', 'recorrencia_data'),
    )

    def __repr__(self):
        return f'<Audiencia {self.tipo_audiencia} {self.data_hora}>'

    def to_dict(self):
        return {
            'id': self.id,
            'processo_id': self.processo_id,
            'titulo': self.titulo,
            'tipo_audiencia': self.tipo_audiencia,
            'modalidade': self.modalidade,
            'data_hora': _iso(self.data_hora),
            'duracao_minutos': self.duracao_minutos,
            'tribunal': self.tribunal,
            'comarca': self.comarca,
            'vara': self.vara,
            'forum': self.forum,
            'sala': self.sala,
            'link_virtual': self.link_virtual,
            'juiz': self.juiz,
            'responsavel': self.responsavel,
            'status': self.status,
            'resultado_tipo': self.resultado_tipo,
            'resultado_descricao': self.resultado_descricao,
            'observacoes': self.observacoes,
            'recorrencia_id': self.recorrencia_id,
            'recorrencia_data': _iso(self.recorrencia_data)
        }


# ============================================================================
# MÓDULO 4: RECORRÊNCIAS E FERIADOS
# ============================================================================

class Recorrencia(db.Model):
    """
    Regra de repetição que gera tarefas, eventos ou audiências

    template_dados guarda os campos copiados para cada ocorrência.
    regra_dias_semana usa 0=Domingo ... 6=Sábado; regra_dia_mes=99 é o último dia.
    """
    __tablename__ = 'recorrencia'

    id = db.Column(db.Integer, primary_key=True)
    template_nome = db.Column(db.String(200), nullable=False)
    template_descricao = db.Column(db.Text)
    entidade_tipo = db.Column(db.String(20), nullable=False)  # tarefa, evento, audiencia
    template_dados = db.Column(db.JSON, default=dict)

    regra_frequencia = db.Column(db.String(10), nullable=False)  # diaria, semanal, mensal, anual
    regra_intervalo = db.Column(db.Integer, nullable=False, default=1)
    regra_dias_semana = db.Column(db.JSON)
    regra_dia_mes = db.Column(db.Integer)
    regra_mes = db.Column(db.Integer)
    regra_hora = db.Column(db.String(5))
    regra_apenas_uteis = db.Column(db.Boolean, default=False)

    ativo = db.Column(db.Boolean, default=True)
    data_inicio = db.Column(db.Date, nullable=False)
    data_fim = db.Column(db.Date)
    max_ocorrencias = db.Column(db.Integer)
    total_criados = db.Column(db.Integer, default=0)
    proxima_execucao = db.Column(db.Date)
    ultima_execucao = db.Column(db.DateTime)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)

    exclusoes = db.relationship('RecorrenciaExclusao', back_populates='recorrencia',
                                cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Recorrencia {self.template_nome} ({self.regra_frequencia})>'

    def datas_excluidas(self):
        return {exclusao.data for exclusao in self.exclusoes}

    def to_dict(self):
        return {
            'id': self.id,
            'template_nome': self.template_nome,
            'template_descricao': self.template_descricao,
            'entidade_tipo': self.entidade_tipo,
            'template_dados': self.template_dados or {},
            'regra_frequencia': self.regra_frequencia,
            'regra_intervalo': self.regra_intervalo,
            'regra_dias_semana': self.regra_dias_semana or [],
            'regra_dia_mes': self.regra_dia_mes,
            'regra_mes': self.regra_mes,
            'regra_hora': self.regra_hora,
            'regra_apenas_uteis': self.regra_apenas_uteis,
            'ativo': self.ativo,
            'data_inicio': _iso(self.data_inicio),
            'data_fim': _iso(self.data_fim),
            'max_ocorrencias': self.max_ocorrencias,
            'total_criados': self.total_criados or 0,
            'proxima_execucao': _iso(self.proxima_execucao),
            'ultima_execucao': _iso(self.ultima_execucao),
            'exclusoes': sorted(d.isoformat() for d in self.datas_excluidas())
        }


class RecorrenciaExclusao(db.Model):
    """
    Data removida de uma série ("excluir apenas esta ocorrência")
    """
    __tablename__ = 'recorrencia_exclusao'

    id = db.Column(db.Integer, primary_key=True)
    recorrencia_id = db.Column(db.Integer, db.ForeignKey('recorrencia.id'), nullable=False)
    data = db.Column(db.Date, nullable=False)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)

    recorrencia = db.relationship('Recorrencia', back_populates='exclusoes')

    __table_args__ = (
        db.UniqueConstraint('recorrencia_id', 'data', name='uq_recorrencia_exclusao'),
    )

    def __repr__(self):
        return f'<RecorrenciaExclusao {self.recorrencia_id} {self.data}>'


class Feriado(db.Model):
    """
    Feriado considerado na contagem de prazos em dias úteis
    """
    __tablename__ = 'feriado'

    id = db.Column(db.Integer, primary_key=True)
    data = db.Column(db.Date, nullable=False)
    descricao = db.Column(db.String(150), nullable=False)
    abrangencia = db.Column(db.String(20), nullable=False, default='nacional')
    uf = db.Column(db.String(2))

    __table_args__ = (
        db.UniqueConstraint('data', 'abrangencia', 'uf', name='uq_feriado'),
        db.Index('idx_feriado_data', 'data'),
    )

    def __repr__(self):
        return f'<Feriado {self.data} {self.descricao}>'

    def to_dict(self):
        return {
            'id': self.id,
            'data': _iso(self.data),
            'descricao': self.descricao,
            'abrangencia': self.abrangencia,
            'uf': self.uf
        }
