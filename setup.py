from setuptools import setup


setup(
	name="tilt-maze",
	version="0.1.0",
	description="Two-level tilt maze inside a rotating glass cube, built on Panda3D",
	python_requires=">=3.10",
	py_modules=[
		"ball_visuals",
		"config",
		"layout",
		"level",
		"logging_config",
		"main",
		"orientation",
		"physics",
		"session",
		"world",
	],
	install_requires=[
		"panda3d",
		"numpy",
	],
	extras_require={
		"test": [
			"pytest<9",
		],
	},
	entry_points={
		"gui_scripts": [
			"tilt-maze = main:run",
		],
	},
	options={
		"build_apps": {
			"gui_apps": {
				"tilt-maze": "main.py",
			},
			"log_filename": "$USER_APPDATA/TiltMaze/output.log",
			"log_append": False,
			"exclude_patterns": [
				"**/__pycache__/**",
				"**/*.pyc",
				"**/*.pyo",
				"tests/**",
			],
			"exclude_modules": [
				"_bootlocale",
				"_posixsubprocess",
				"grp",
			],
			"plugins": [
				"pandagl",
			],
			"platforms": [
				"manylinux2014_x86_64",
				"macosx_10_9_x86_64",
				"win_amd64",
			],
		}
	},
)
