from setuptools import setup, find_packages

setup(
    name="promptplanner",
    version="0.1.0",
    description="Project analysis and phase-by-phase development prompts from Claude, OpenAI, xAI, DeepSeek or a custom LLM API",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["promptplanner", "promptplanner.*"]),
    include_package_data=True,
    py_modules=['cli'],
    install_requires=[
        "click>=8.0",
        "aiohttp>=3.9",
        "pyyaml>=6.0",
        "streamlit>=1.30",
        "pandas>=1.0",
        "plotly>=5.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "promptplanner=cli:cli"
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Intended Audience :: Developers",
        "Topic :: Software Development",
        "Topic :: Scientific/Engineering :: Artificial Intelligence"
    ],
    keywords="llm, planning, prompts, claude, openai, xai, deepseek, proxy",
    python_requires=">=3.9",
)
