from setuptools import setup, find_packages

setup(
    name="minesweeper_view",
    version="0.1.0",
    packages=find_packages(),
    py_modules=["main", "push_monitor"],
    package_data={"desktop_ui": ["qml/*.qml"]},
    install_requires=[
        "requests>=2.31.0",
        "paho-mqtt>=2.0.0",
        "python-dotenv>=1.0.0",
        "PySide6>=6.7",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "gui_scripts": ["minesweeper-view=desktop_ui.app:main"],
    },
    python_requires=">=3.10",
)
