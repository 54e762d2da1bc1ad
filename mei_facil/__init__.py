# mei_facil/__init__.py
"""MEI Fácil: controle financeiro e relatórios para o Microempreendedor Individual."""

__version__ = "0.1.0"
