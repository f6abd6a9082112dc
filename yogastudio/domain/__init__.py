"""Domain packages: each has repository, schemas, service and router modules"""
