"""Конфигурация Imagio."""
