"""Execução de tarefas em background."""

from .dispatch_queue import AsyncDispatchQueue

__all__ = ["AsyncDispatchQueue"]
