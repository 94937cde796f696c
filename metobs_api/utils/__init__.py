# Utility helpers package
