"""Connessione database ed eccezioni di persistenza"""
