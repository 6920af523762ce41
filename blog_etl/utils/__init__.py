"""Shared utilities: table validation"""
