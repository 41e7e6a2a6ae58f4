"""Connectors: adapters de borda para plataformas externas.

Estrutura:
- uim/: plataforma UIM (eventos, comandos, webhook)
"""

__all__: list[str] = []
