"""HR Dashboard package.

Organised by feature modules (employees, leaves, medical, documents, ...)
with a thin Flask controller layer over service/repository layers.
"""
