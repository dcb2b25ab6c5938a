"""FinAdvisor launcher"""
from finadvisor.main import main

if __name__ == "__main__":
    main()
