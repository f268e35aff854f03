"""Database layer: connection pool, schema and queries"""
