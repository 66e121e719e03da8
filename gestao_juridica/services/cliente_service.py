"""
Serviço de Clientes - cadastro de pessoas físicas e jurídicas
"""
from sqlalchemy import or_

from gestao_juridica.errors import RegistroNaoEncontrado
from gestao_juridica.models import db, Cliente
from gestao_juridica.services.listagem import paginar
from gestao_juridica.services.validadores import somente_digitos, validar_cpf, validar_cnpj


class ClienteService:
    """
    Serviço para gerenciamento de clientes
    """

    CAMPOS_EDITAVEIS = ('nome_completo', 'nome_fantasia', 'email', 'telefone', 'endereco', 'observacoes')

    @staticmethod
    def _validar_documento(documento, tipo_pessoa, cliente_id=None):
        """Retorna o documento só com dígitos ou None; levanta ValueError se inválido"""
        digitos = somente_digitos(documento)
        if not digitos:
            return None

        if tipo_pessoa == 'pj':
            if not validar_cnpj(digitos):
                raise ValueError('CNPJ inválido')
        elif not validar_cpf(digitos):
            raise ValueError('CPF inválido')

        existe = Cliente.query.filter(Cliente.cpf_cnpj == digitos)
        if cliente_id:
            existe = existe.filter(Cliente.id != cliente_id)
        if existe.first():
            raise ValueError('Já existe um cliente com este documento')

        return digitos

    @staticmethod
    def criar(dados):
        """
        Cria um novo cliente

        Args:
            dados (dict): nome_completo (obrigatório), tipo_pessoa (pf/pj), cpf_cnpj, email...

        Returns:
            Cliente: Objeto criado

        Raises:
            ValueError: Se dados inválidos
        """
        if not dados.get('nome_completo'):
            raise ValueError('Nome é obrigatório')

        tipo_pessoa = dados.get('tipo_pessoa', 'pf')
        if tipo_pessoa not in ('pf', 'pj'):
            raise ValueError("Tipo de pessoa inválido. Use 'pf' ou 'pj'")

        cliente = Cliente(
            tipo_pessoa=tipo_pessoa,
            cpf_cnpj=ClienteService._validar_documento(dados.get('cpf_cnpj'), tipo_pessoa),
            ativo=dados.get('ativo', True),
            **{campo: dados.get(campo) for campo in ClienteService.CAMPOS_EDITAVEIS}
        )

        db.session.add(cliente)
        db.session.commit()

        return cliente

    @staticmethod
    def obter(cliente_id):
        cliente = db.session.get(Cliente, cliente_id)
        if not cliente:
            raise RegistroNaoEncontrado('Cliente não encontrado')
        return cliente

    @staticmethod
    def listar(busca=None, ativo=True, pagina=1, por_pagina=50):
        """
        Lista clientes com busca por nome/documento

        Returns:
            dict: Resultado paginado (itens, total, pagina...)
        """
        query = Cliente.query

        if ativo is not None:
            query = query.filter(Cliente.ativo.is_(ativo))

        if busca:
            termo = f'%{busca}%'
            filtros = [Cliente.nome_completo.ilike(termo), Cliente.nome_fantasia.ilike(termo)]
            digitos = somente_digitos(busca)
            if digitos:
                filtros.append(Cliente.cpf_cnpj.like(f'%{digitos}%'))
            query = query.filter(or_(*filtros))

        return paginar(query.order_by(Cliente.nome_completo), pagina, por_pagina)

    @staticmethod
    def atualizar(cliente_id, dados):
        cliente = ClienteService.obter(cliente_id)

        if 'nome_completo' in dados and not dados['nome_completo']:
            raise ValueError('Nome é obrigatório')

        if 'tipo_pessoa' in dados:
            if dados['tipo_pessoa'] not in ('pf', 'pj'):
                raise ValueError("Tipo de pessoa inválido. Use 'pf' ou 'pj'")
            cliente.tipo_pessoa = dados['tipo_pessoa']

        if 'cpf_cnpj' in dados or 'tipo_pessoa' in dados:
            cliente.cpf_cnpj = ClienteService._validar_documento(
                dados.get('cpf_cnpj', cliente.cpf_cnpj), cliente.tipo_pessoa, cliente.id)

        for campo in ClienteService.CAMPOS_EDITAVEIS:
            if campo in dados:
                setattr(cliente, campo, dados[campo])

        db.session.commit()
        return cliente

    @staticmethod
    def inativar(cliente_id):
        cliente = ClienteService.obter(cliente_id)
        cliente.ativo = False
        db.session.commit()
        return cliente
