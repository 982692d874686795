"""
Run with: python -m bubblechart [dataset.json]
"""
from bubblechart.main import main

if __name__ == "__main__":
    main()
