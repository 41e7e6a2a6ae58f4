"""API: camada de borda do SDK.

Responsabilidades:
- Fachada do cliente UIM (requests, eventos, token, fila assíncrona)
- Receber webhooks da plataforma e validar chave/assinatura
- Modelos de envelope (CloudEvents)

Subpastas:
- connectors/: adapters por plataforma

NÃO PODE conter: retry, transporte, cache de token (ficam em app/infra).
"""
