"""Share links - expiring store, Celery sweep task and the share API"""
