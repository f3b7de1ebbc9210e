"""Interfaces/abstracciones del Core.

Por qué:
- Define el contrato (Protocol) que implementa el cliente HTTP concreto.
- Permite que los servicios dependan de la abstracción y no de `httpx`.
"""
