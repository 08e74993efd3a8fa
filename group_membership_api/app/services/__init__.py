"""
Service layer.

Each service encapsulates the business logic of a domain and works on
the connection of the current request, so API handlers never issue SQL
themselves.
"""
