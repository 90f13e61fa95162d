"""Modbus master/slave test bench."""
