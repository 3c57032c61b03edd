"""Local filesystem storage: directories as containers, files as items."""