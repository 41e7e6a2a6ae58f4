"""App: núcleo de execução do SDK.

Subpastas:
- infra/http/: flattening, montagem, transporte, executor resiliente, respostas
- infra/auth/: token client_credentials e cache
- infra/crypto/: assinatura HMAC de webhooks
- infra/tasks/: fila assíncrona de tarefas

Padrão: app executa; api adapta; config configura; utils apoia.
"""
