"""Yoga studio platform API"""
