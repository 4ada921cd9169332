"""
Couche infrastructure de MediaBridge.

Ce module contient les implementations concretes des interfaces definies
dans la couche domaine (ports) :

- persistence/ : Stockage SQLite avec SQLModel (serveurs, sessions actives,
  positions de lecture)
"""
