# Cart, checkout and backend services
