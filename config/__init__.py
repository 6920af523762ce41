"""Project configuration: data paths and post settings"""
