"""SayItLoud feed backend."""
