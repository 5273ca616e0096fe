"""Exam extraction - prompts, engine orchestration and the extraction API"""
